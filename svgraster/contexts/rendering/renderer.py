"""
SVG to PNG rendering through the native engine.

Orchestrates one render call: marshal options into tracked unmanaged memory, invoke
the engine, translate failures or transfer the PNG, and release every marshaled
region before returning or raising.
"""

import time
from typing import Any, Optional

from svgraster.contexts.rendering.allocation import AllocationTracker
from svgraster.contexts.rendering.exceptions import STATUS_OK, SvgRasterError, translate_status
from svgraster.contexts.rendering.logger import (
    log_marshaled_regions,
    log_render_failure,
    log_render_result,
    log_render_start,
)
from svgraster.contexts.rendering.marshaling import encode_document, marshal_options
from svgraster.contexts.rendering.native import NativeEngine
from svgraster.contexts.rendering.options import RenderConfiguration
from svgraster.contexts.rendering.transfer import take_output


def render_to_png(
    document: str,
    configuration: Optional[RenderConfiguration] = None,
    engine: Optional[NativeEngine] = None,
    allocator: Optional[Any] = None,
) -> bytes:
    """
    Render an SVG document to PNG bytes.

    Args:
        document: SVG text (must be non-empty)
        configuration: Render options (default: RenderConfiguration())
        engine: Native engine to call (default: the process-wide shared library)
        allocator: malloc/free provider for marshaled regions (default: C runtime)

    Returns:
        PNG data

    Raises:
        ArgumentError: If the document or an option is invalid (no native call is made)
        FontLoadError: If a font buffer is empty, or the engine fails to load a font
        ParseError: If the engine cannot parse the document
        RenderError: If rasterization fails
        OutOfMemoryError: If the engine runs out of memory
        UnknownError: For any other native status
        MarshalingError: If allocating marshaled memory fails
        LibraryNotFoundError: If no engine was given and the library cannot be loaded
    """
    svg_data = encode_document(document)
    if configuration is None:
        configuration = RenderConfiguration()
    if engine is None:
        engine = NativeEngine.load()

    log_render_start(len(svg_data) - 1, configuration)
    start_time = time.perf_counter()
    tracker = AllocationTracker(allocator)

    try:
        with tracker:
            block = marshal_options(configuration, tracker)
            log_marshaled_regions(tracker.regions, tracker.total_bytes)

            status, address, length = engine.render(svg_data, block)
            if status != STATUS_OK:
                raise translate_status(status)

            png_data = take_output(engine, address, length)
    except SvgRasterError as e:
        log_render_failure(e, tracker.released, time.perf_counter() - start_time)
        raise

    log_render_result(len(png_data), time.perf_counter() - start_time)
    return png_data
