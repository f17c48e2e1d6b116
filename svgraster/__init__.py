"""
svgraster - SVG to PNG rendering through the native resvg engine

Renders SVG documents with resvg via a small C ABI wrapper (resvg_wrapper),
loaded at runtime with cffi.

Architecture:
- Rendering Context: option marshaling, unmanaged memory tracking, native call,
  error translation and PNG transfer
- Utils: logging setup shared by scripts
"""

from svgraster.contexts.rendering import (
    ArgumentError,
    FontLoadError,
    LibraryNotFoundError,
    MarshalingError,
    NativeRenderError,
    OutOfMemoryError,
    ParseError,
    RenderConfiguration,
    RenderError,
    SvgRasterError,
    UnknownError,
    load_render_configuration,
    read_font_files,
    render_to_png,
)

__version__ = "0.1.0"

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
