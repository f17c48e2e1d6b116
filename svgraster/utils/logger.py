"""
Generic logger setup utilities.

Loguru configuration shared by every context: one DEBUG file sink per session,
a colorized console sink, and a provenance header identifying the run.
Context-specific wrappers live in contexts/{context}/logger.py.
"""

import platform
import sys
from pathlib import Path

import cffi
from loguru import logger

FILE_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <7} | {thread.name} | {message}"
CONSOLE_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | <level>{message}</level>"

# Console colors; levels not listed keep loguru's defaults
LEVEL_COLORS = {
    "WARNING": "<yellow>",
    "ERROR": "<red>",
    "CRITICAL": "<bold><red>",
}


def setup_logger(
    context_name: str,
    log_dir: Path,
    extra_provenance: dict = None,
    level_colors: dict = None,
    console_level: str = "INFO",
) -> Path:
    """
    Replace loguru's handlers with a session file sink and a console sink.

    Render calls may run on several threads at once, so the file sink records the
    thread name.

    Args:
        context_name: Context identifier, used as the log file stem (e.g., "render")
        log_dir: Directory for this logging session (created if missing)
        extra_provenance: Additional key-value pairs for the provenance header
        level_colors: Override console level colors (e.g., {"INFO": "<cyan>"})
        console_level: Minimum level shown on the console

    Returns:
        Path to log file

    Example:
        log_file = setup_logger(
            context_name="render",
            log_dir=Path("outs/logs/render_20251114_123456"),
            extra_provenance={"Native library": "libresvg_wrapper.so"},
            console_level="DEBUG",
        )
    """
    log_dir.mkdir(exist_ok=True, parents=True)
    log_file = log_dir / f"{context_name}.log"

    logger.remove()

    for level_name, color in {**LEVEL_COLORS, **(level_colors or {})}.items():
        logger.level(level_name, color=color)

    logger.add(log_file, format=FILE_FORMAT, level="DEBUG")
    logger.add(sys.stdout, format=CONSOLE_FORMAT, level=console_level, colorize=True)

    log_provenance(context_name, extra_provenance)

    return log_file


def runtime_provenance() -> dict:
    """Interpreter and FFI details that affect how native calls are made."""
    return {
        "Python": f"{platform.python_implementation()} {sys.version.split()[0]}",
        "Platform": f"{platform.system()} {platform.machine()}",
        "cffi": cffi.__version__,
    }


def log_provenance(context_name: str, extra_context: dict = None) -> None:
    """Log a header with the command line, runtime details and any extra context."""
    header = {
        "Context": context_name,
        "Command": " ".join(sys.argv),
        "Working directory": str(Path.cwd()),
        **runtime_provenance(),
        **(extra_context or {}),
    }

    logger.info("=" * 80)
    for key, value in header.items():
        logger.info(f"{key}: {value}")
    logger.info("=" * 80)
