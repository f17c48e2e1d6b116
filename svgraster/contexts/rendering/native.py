"""
Native Call Boundary

Declares the resvg_wrapper C ABI for cffi (ABI mode, no compiled shim), loads the
shared library and the C runtime allocator, and exposes the two entry points through
NativeEngine.

Environment variables:
- SVGRASTER_LIB_PATH: full path to the resvg_wrapper shared library
- SVGRASTER_LIB_DIR: directory containing the shared library
"""

import ctypes.util
import os
import sys
from functools import lru_cache
from pathlib import Path
from typing import Any, Iterator, List, Optional, Tuple

from cffi import FFI
from dotenv import load_dotenv

from svgraster.contexts.rendering.exceptions import LibraryNotFoundError

load_dotenv()

LIBRARY_NAME = "resvg_wrapper"

ffi = FFI()

# Field order and widths must match the #[repr(C)] struct in the native wrapper.
ffi.cdef(
    r"""
    typedef struct {
        int width;
        int height;
        float zoom;
        int dpi;
        bool skip_system_fonts;
        const char *background;
        const char *export_id;
        bool export_area_page;
        bool export_area_drawing;
        const char *resources_dir;
        const uint8_t *const *fonts;
        const size_t *font_lens;
        size_t font_count;
        const char *font_file;
        const char *font_dir;
        const char *serif_family;
        const char *sans_serif_family;
        const char *cursive_family;
        const char *fantasy_family;
        const char *monospace_family;
    } RenderOptions;

    int render_svg_to_png_with_options(const char *svg_data, const RenderOptions *options,
                                       uint8_t **out_buf, size_t *out_len);
    void free_png_buffer(uint8_t *buffer, size_t len);

    void *malloc(size_t size);
    void free(void *ptr);
    """
)

POINTER_WIDTH = ffi.sizeof("void *")
SIZE_WIDTH = ffi.sizeof("size_t")


def platform_library_name() -> str:
    if sys.platform.startswith("linux"):
        return f"lib{LIBRARY_NAME}.so"
    if sys.platform == "darwin":
        return f"lib{LIBRARY_NAME}.dylib"
    if os.name == "nt":
        return f"{LIBRARY_NAME}.dll"
    return f"lib{LIBRARY_NAME}.so"


def candidate_paths() -> Iterator[str]:
    """Yield library locations in lookup order (env path, env dir, local builds, system)."""
    lib_path = os.getenv("SVGRASTER_LIB_PATH")
    if lib_path:
        yield lib_path

    lib_dir = os.getenv("SVGRASTER_LIB_DIR")
    if lib_dir:
        yield str(Path(lib_dir) / platform_library_name())

    # svgraster/contexts/rendering/native.py -> repo root
    repo_root = Path(__file__).resolve().parents[3]
    for profile in ("release", "debug"):
        path = repo_root / "native" / "resvg-wrapper" / "target" / profile / platform_library_name()
        if path.exists():
            yield str(path)

    yield platform_library_name()


@lru_cache(maxsize=None)
def load_library() -> Tuple[Any, str]:
    """
    Load the resvg_wrapper shared library once per process.

    Returns:
        Tuple of (cffi library handle, path or name it was loaded from)

    Raises:
        LibraryNotFoundError: If no candidate could be opened
    """
    errors: List[str] = []
    for candidate in candidate_paths():
        try:
            return ffi.dlopen(candidate), candidate
        except OSError as e:
            errors.append(f"{candidate}: {e}")

    hint = (
        "Set SVGRASTER_LIB_PATH to the full path of the resvg_wrapper library or "
        "SVGRASTER_LIB_DIR to the folder containing it."
    )
    raise LibraryNotFoundError(
        f"Could not load {LIBRARY_NAME}:\n  " + "\n  ".join(errors) + f"\n{hint}"
    )


@lru_cache(maxsize=None)
def load_libc() -> Any:
    """Load the C runtime that provides malloc/free for marshaled regions."""
    candidates: List[Optional[str]] = [ctypes.util.find_library("c")]
    if os.name == "nt":
        candidates.append("msvcrt")
    else:
        # Process globals already contain libc on most Unix platforms
        candidates.append(None)

    last_error: Optional[Exception] = None
    for name in candidates:
        if name is None and os.name == "nt":
            continue
        try:
            return ffi.dlopen(name)
        except OSError as e:
            last_error = e

    raise LibraryNotFoundError(f"Unable to load the C runtime allocator: {last_error}")


def address_of(pointer: Any) -> int:
    """Integer address of a cffi pointer (for logging and comparisons)."""
    return int(ffi.cast("uintptr_t", pointer))


class NativeEngine:
    """
    Thin wrapper over the two resvg_wrapper entry points.

    Performs no interpretation of the status code; callers route on it.

    Attributes:
        lib: Object exposing render_svg_to_png_with_options and free_png_buffer
        source: Where the library was loaded from (for diagnostics)
    """

    def __init__(self, lib: Any, source: str = "<in-process>"):
        self.lib = lib
        self.source = source

    @classmethod
    def load(cls) -> "NativeEngine":
        """Engine bound to the process-wide shared library."""
        lib, source = load_library()
        return cls(lib, source)

    def render(self, document: bytes, block: Any) -> Tuple[int, Any, int]:
        """
        Invoke render_svg_to_png_with_options.

        Args:
            document: UTF-8 encoded, NUL-terminated SVG text
            block: RenderOptions * built by the marshaler

        Returns:
            Tuple of (status, output address, output length). Address and length are
            only meaningful when status is 0.
        """
        out_buf = ffi.new("uint8_t **")
        out_len = ffi.new("size_t *")
        status = self.lib.render_svg_to_png_with_options(document, block, out_buf, out_len)
        return status, out_buf[0], out_len[0]

    def free_output_buffer(self, address: Any, length: int) -> None:
        """Release a buffer previously returned by a successful render()."""
        self.lib.free_png_buffer(address, length)
