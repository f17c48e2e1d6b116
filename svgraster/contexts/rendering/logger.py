"""
Rendering context logger.

Provides logging interface for rendering context with automatic [render] prefix.
All rendering modules should import from this module, not from utils.logger directly.
"""

from pathlib import Path
from typing import List

from loguru import logger

from svgraster.utils.logger import setup_logger as _setup_logger

CONTEXT_PREFIX = "[render]"


def setup_rendering_logger(log_dir: Path, library_source: str = None) -> Path:
    """
    Setup logger for rendering context.

    Args:
        log_dir: Directory for this rendering session
        library_source: Where the native library was loaded from (for provenance)

    Returns:
        Path to log file
    """
    return _setup_logger(
        context_name="render",
        log_dir=log_dir,
        extra_provenance={"Native library": library_source or "<not loaded>"},
    )


# Wrapper functions with automatic [render] prefix


def _log_info(message: str) -> None:
    """Log info message with [render] prefix."""
    logger.info(f"{CONTEXT_PREFIX} {message}")


def _log_success(message: str) -> None:
    """Log success message with [render] prefix."""
    logger.success(f"{CONTEXT_PREFIX} {message}")


def _log_error(message: str) -> None:
    """Log error message with [render] prefix."""
    logger.error(f"{CONTEXT_PREFIX} {message}")


def _log_debug(message: str) -> None:
    """Log debug message with [render] prefix."""
    logger.debug(f"{CONTEXT_PREFIX} {message}")


# High-level rendering-specific logging helpers


def log_render_start(document_size: int, configuration) -> None:
    """Log start of a render call."""
    _log_info(f"Rendering {document_size} byte SVG document")
    _log_debug(f"  Options: {configuration}")
    if configuration.use_fonts:
        _log_debug(f"  Embedded fonts: {len(configuration.use_fonts)}")
    for generic, family in configuration.family_overrides().items():
        _log_debug(f"  {generic} -> {family}")


def log_marshaled_regions(regions: List, total_bytes: int) -> None:
    """Log the unmanaged regions backing a parameter block."""
    _log_debug(f"Marshaled {len(regions)} regions ({total_bytes} bytes)")
    for region in regions:
        _log_debug(f"  {region!r}")


def log_render_result(png_size: int, elapsed_time: float) -> None:
    """Log a successful render."""
    _log_success(f"Rendered {png_size} byte PNG ({elapsed_time:.3f}s)")


def log_render_failure(error: Exception, released: int, elapsed_time: float) -> None:
    """
    Log a failed render.

    Args:
        error: Exception about to propagate to the caller
        released: Number of regions released during cleanup
        elapsed_time: Time spent in the call
    """
    status = getattr(error, "status", None)
    if status is not None:
        _log_error(f"Render failed: {type(error).__name__} (status {status}, {elapsed_time:.3f}s)")
    else:
        _log_error(f"Render failed: {type(error).__name__}: {error} ({elapsed_time:.3f}s)")
    _log_debug(f"  Released {released} regions after failure")
