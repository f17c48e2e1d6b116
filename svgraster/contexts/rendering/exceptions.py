"""Exceptions raised by the rendering context, and native status translation."""

from typing import Optional

STATUS_OK = 0
STATUS_PARSE_ERROR = 1
STATUS_RENDER_ERROR = 2
STATUS_FONT_LOAD_ERROR = 3
STATUS_OUT_OF_MEMORY = 4


class SvgRasterError(Exception):
    """Base class for every error surfaced by svgraster."""

    pass


class ArgumentError(SvgRasterError, ValueError):
    """
    Exception raised when caller input is rejected before reaching the native engine.

    Attributes:
        message: Error description
        argument: Name of the offending argument or option (if known)
    """

    def __init__(self, message: str, argument: Optional[str] = None):
        self.message = message
        self.argument = argument

        if argument:
            super().__init__(f"{message} (argument: {argument})")
        else:
            super().__init__(message)


class MarshalingError(SvgRasterError):
    """
    Exception raised for an unclassified fault while building the native parameter block.

    Typically an unmanaged allocation failure. All regions acquired before the fault
    have already been released when the caller sees this error.
    """

    pass


class LibraryNotFoundError(SvgRasterError, OSError):
    """Exception raised when the native resvg_wrapper library cannot be loaded."""

    pass


class NativeRenderError(SvgRasterError):
    """
    Exception raised for a failure reported by (or destined for) the native engine.

    Attributes:
        message: Error description
        status: Native status code, or None when detected before the native call
    """

    def __init__(self, message: str, status: Optional[int] = None):
        self.message = message
        self.status = status
        super().__init__(message)


class ParseError(NativeRenderError):
    """The SVG document failed to parse."""


class RenderError(NativeRenderError):
    """Rasterization or PNG encoding failed."""


class FontLoadError(NativeRenderError):
    """
    A supplied font could not be loaded.

    Raised by the marshaler for an empty or missing font buffer (``status`` is None and
    ``index`` points at the offending entry), or translated from native status 3.
    """

    def __init__(
        self,
        message: str,
        status: Optional[int] = None,
        index: Optional[int] = None,
    ):
        self.index = index
        if index is not None:
            message = f"{message} (font index: {index})"
        super().__init__(message, status)


class OutOfMemoryError(NativeRenderError, MemoryError):
    """The native engine failed to allocate memory."""


class UnknownError(NativeRenderError):
    """The native engine returned a status code outside the known set."""

    def __init__(self, status: int):
        super().__init__(f"Unknown native error: {status}", status)


_STATUS_ERRORS = {
    STATUS_PARSE_ERROR: (ParseError, "Failed to parse SVG"),
    STATUS_RENDER_ERROR: (RenderError, "Failed to render PNG"),
    STATUS_FONT_LOAD_ERROR: (FontLoadError, "Failed to load fonts"),
    STATUS_OUT_OF_MEMORY: (OutOfMemoryError, "Memory allocation failed"),
}


def translate_status(status: int) -> NativeRenderError:
    """
    Map a non-zero native status code to the matching exception instance.

    Args:
        status: Status code returned by render_svg_to_png_with_options

    Returns:
        Exception instance ready to be raised (not raised here)

    Raises:
        ValueError: If called with the success status
    """
    if status == STATUS_OK:
        raise ValueError("Status 0 is success and has no error translation")

    if status in _STATUS_ERRORS:
        error_class, message = _STATUS_ERRORS[status]
        return error_class(message, status)

    return UnknownError(status)
