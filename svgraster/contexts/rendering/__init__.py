"""
Rendering Context

Responsibilities:
- Marshals render options into the native parameter block
- Owns every unmanaged region for the duration of a render call
- Invokes the native resvg_wrapper engine and translates its status codes
- Transfers the native PNG buffer into caller-owned bytes

Owns: FFI boundary, unmanaged memory lifetime, native error translation
Never: Parses SVG or rasterizes (the native engine does)
"""

from svgraster.contexts.rendering.exceptions import (
    ArgumentError,
    FontLoadError,
    LibraryNotFoundError,
    MarshalingError,
    NativeRenderError,
    OutOfMemoryError,
    ParseError,
    RenderError,
    SvgRasterError,
    UnknownError,
)
from svgraster.contexts.rendering.options import (
    RenderConfiguration,
    load_render_configuration,
    read_font_files,
)
from svgraster.contexts.rendering.renderer import render_to_png

__all__ = [
    "ArgumentError",
    "FontLoadError",
    "LibraryNotFoundError",
    "MarshalingError",
    "NativeRenderError",
    "OutOfMemoryError",
    "ParseError",
    "RenderConfiguration",
    "RenderError",
    "SvgRasterError",
    "UnknownError",
    "load_render_configuration",
    "read_font_files",
    "render_to_png",
]
