"""
Option Marshaling

Converts a RenderConfiguration into the fixed-layout RenderOptions struct consumed by
the native engine. Every variable-length value lives in a region owned by the
AllocationTracker passed in; the struct only ever points into tracked regions.
"""

from typing import Any, List, Optional

from svgraster.contexts.rendering.allocation import AllocationTracker, RegionRole
from svgraster.contexts.rendering.exceptions import ArgumentError, FontLoadError
from svgraster.contexts.rendering.native import POINTER_WIDTH, SIZE_WIDTH, ffi
from svgraster.contexts.rendering.options import RenderConfiguration

UNSET_DIMENSION = -1
UNSET_ZOOM = 0.0

INT32_MIN = -(2**31)
INT32_MAX = 2**31 - 1

# RenderConfiguration field -> RenderOptions field, in struct order
STRING_FIELDS = (
    ("background", "background"),
    ("export_id", "export_id"),
    ("resources_dir", "resources_dir"),
    ("use_font_file", "font_file"),
    ("use_font_dir", "font_dir"),
    ("serif_family", "serif_family"),
    ("sans_serif_family", "sans_serif_family"),
    ("cursive_family", "cursive_family"),
    ("fantasy_family", "fantasy_family"),
    ("monospace_family", "monospace_family"),
)


def length_element_type(size_width: int) -> str:
    """
    C element type used for the font length array on a platform with the given size_t width.

    Raises:
        ValueError: For widths other than 4 or 8 bytes
    """
    if size_width == 4:
        return "uint32_t"
    if size_width == 8:
        return "uint64_t"
    raise ValueError(f"Unsupported size_t width: {size_width}")


# Selected once per process
LENGTH_ELEMENT_TYPE = length_element_type(SIZE_WIDTH)


def encode_c_string(value: str, argument: str) -> bytes:
    """
    UTF-8 encode a string with an explicit NUL terminator.

    Raises:
        ArgumentError: If value is not a str, contains an embedded NUL, or cannot be encoded
    """
    if not isinstance(value, str):
        raise ArgumentError(f"Expected a string, got {type(value).__name__}", argument=argument)
    if "\0" in value:
        raise ArgumentError("Embedded NUL characters are not allowed", argument=argument)
    try:
        encoded = value.encode("utf-8")
    except UnicodeEncodeError as e:
        raise ArgumentError(f"Text is not valid UTF-8: {e.reason}", argument=argument) from e
    return encoded + b"\0"


def encode_document(document: Optional[str]) -> bytes:
    """
    Encode SVG text for the native call.

    Raises:
        ArgumentError: If the document is None, empty, or not a string
    """
    if document is None or document == "":
        raise ArgumentError("SVG document must not be empty", argument="document")
    return encode_c_string(document, "document")


def _int32(value: Any, argument: str) -> int:
    if isinstance(value, bool) or not isinstance(value, int):
        raise ArgumentError(f"Expected an integer, got {value!r}", argument=argument)
    if not INT32_MIN <= value <= INT32_MAX:
        raise ArgumentError(f"Value {value} does not fit in a 32-bit int", argument=argument)
    return value


def _float(value: Any, argument: str) -> float:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        raise ArgumentError(f"Expected a number, got {value!r}", argument=argument)
    return float(value)


def validate_fonts(fonts: List[bytes]) -> None:
    """
    Reject missing or empty font buffers before anything is copied.

    Raises:
        FontLoadError: If an entry is None or empty
        ArgumentError: If an entry is not bytes-like
    """
    for index, font in enumerate(fonts):
        if font is None or (isinstance(font, (bytes, bytearray, memoryview)) and len(font) == 0):
            raise FontLoadError("Font data cannot be null or empty", index=index)
        if not isinstance(font, (bytes, bytearray, memoryview)):
            raise ArgumentError(
                f"Font data must be bytes, got {type(font).__name__} at index {index}",
                argument="use_fonts",
            )


def _marshal_fonts(block: Any, fonts: List[bytes], tracker: AllocationTracker) -> None:
    count = len(fonts)
    font_regions = [tracker.store(bytes(font), RegionRole.FONT) for font in fonts]

    pointer_region = tracker.allocate(POINTER_WIDTH * count, RegionRole.POINTER_ARRAY)
    pointers = ffi.cast("const uint8_t **", pointer_region.address)

    length_region = tracker.allocate(SIZE_WIDTH * count, RegionRole.LENGTH_ARRAY)
    lengths = ffi.cast(f"{LENGTH_ELEMENT_TYPE} *", length_region.address)

    for i, region in enumerate(font_regions):
        pointers[i] = ffi.cast("const uint8_t *", region.address)
        lengths[i] = region.size

    block.fonts = pointers
    block.font_lens = ffi.cast("const size_t *", length_region.address)
    block.font_count = count


def marshal_options(configuration: RenderConfiguration, tracker: AllocationTracker) -> Any:
    """
    Build a RenderOptions struct for the given configuration.

    The configuration is not modified. Regions backing the struct belong to tracker and
    stay valid until tracker.release_all(); the struct must not be used after that.

    Args:
        configuration: Render options
        tracker: Tracker that takes ownership of every allocated region

    Returns:
        cffi ``RenderOptions *``

    Raises:
        ArgumentError: For wrong-typed or out-of-range options
        FontLoadError: For a None or empty font buffer
        MarshalingError: If an allocation fails
    """
    fonts = configuration.use_fonts
    if fonts:
        validate_fonts(fonts)

    block = ffi.new("RenderOptions *")

    block.width = (
        UNSET_DIMENSION if configuration.width is None else _int32(configuration.width, "width")
    )
    block.height = (
        UNSET_DIMENSION if configuration.height is None else _int32(configuration.height, "height")
    )
    block.zoom = UNSET_ZOOM if configuration.zoom is None else _float(configuration.zoom, "zoom")
    block.dpi = _int32(configuration.dpi, "dpi")
    block.skip_system_fonts = bool(configuration.skip_system_fonts)
    block.export_area_page = bool(configuration.export_area_page)
    block.export_area_drawing = bool(configuration.export_area_drawing)

    for option_name, struct_field in STRING_FIELDS:
        value = getattr(configuration, option_name)
        # Empty strings are treated as "not specified"
        if value is None or value == "":
            continue
        region = tracker.store(encode_c_string(value, option_name), RegionRole.STRING)
        setattr(block, struct_field, ffi.cast("const char *", region.address))

    if fonts:
        _marshal_fonts(block, fonts, tracker)

    return block

