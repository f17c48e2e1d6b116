"""
Shared fixtures: an in-process stand-in for the resvg_wrapper library and an
instrumented allocator.

FakeResvgLib exposes the same two entry points as the shared library and reads the
real cffi RenderOptions struct produced by the marshaler, so tests exercise the
actual marshaling, boundary and transfer code.
"""

import hashlib
import re
from typing import Any, Dict, List, Optional

import pytest

from svgraster.contexts.rendering.allocation import CAllocator
from svgraster.contexts.rendering.exceptions import MarshalingError
from svgraster.contexts.rendering.marshaling import STRING_FIELDS
from svgraster.contexts.rendering.native import NativeEngine, address_of, ffi

PNG_SIGNATURE = b"\x89PNG\r\n\x1a\n"

FONT_FAMILY_PATTERN = re.compile(rb'font-family="([^"]+)"')

GENERIC_STRUCT_FIELDS = {
    b"serif": "serif_family",
    b"sans-serif": "sans_serif_family",
    b"cursive": "cursive_family",
    b"fantasy": "fantasy_family",
    b"monospace": "monospace_family",
}


def read_string_field(block: Any, struct_field: str) -> Optional[str]:
    """Decode a string field of a marshaled block (None for NULL)."""
    pointer = getattr(block, struct_field)
    if pointer == ffi.NULL:
        return None
    return ffi.string(pointer).decode("utf-8")


def read_fonts(block: Any) -> List[bytes]:
    """Copy the font buffers referenced by a marshaled block, in array order."""
    return [ffi.buffer(block.fonts[i], block.font_lens[i])[:] for i in range(block.font_count)]


def snapshot_block(block: Any) -> Dict[str, Any]:
    """Copy every field of a RenderOptions struct into plain Python values."""
    snapshot = {
        "width": block.width,
        "height": block.height,
        "zoom": block.zoom,
        "dpi": block.dpi,
        "skip_system_fonts": bool(block.skip_system_fonts),
        "export_area_page": bool(block.export_area_page),
        "export_area_drawing": bool(block.export_area_drawing),
        "font_count": block.font_count,
        "fonts": read_fonts(block),
    }
    for _, struct_field in STRING_FIELDS:
        snapshot[struct_field] = read_string_field(block, struct_field)
    return snapshot


class FakeResvgLib:
    """
    Deterministic stand-in for the native library.

    The "PNG" is a signature followed by a digest of the document (with generic font
    families resolved through the overrides) and the size-affecting options.
    """

    def __init__(self, status: int = 0):
        self.status = status
        self.calls: List[Dict[str, Any]] = []
        self.outstanding: Dict[int, Any] = {}
        self.returned: List[tuple] = []
        self.freed: List[tuple] = []

    def render_svg_to_png_with_options(self, svg_data, options, out_buf, out_len) -> int:
        assert svg_data.endswith(b"\0"), "document must be NUL-terminated"
        snapshot = snapshot_block(options)
        snapshot["document"] = svg_data[:-1]
        self.calls.append(snapshot)

        if self.status != 0:
            return self.status

        png = self._fake_png(snapshot)
        buffer = ffi.new("uint8_t[]", len(png))
        ffi.memmove(buffer, png, len(png))
        self.outstanding[address_of(buffer)] = buffer
        self.returned.append((address_of(buffer), len(png)))
        out_buf[0] = buffer
        out_len[0] = len(png)
        return 0

    def free_png_buffer(self, buffer, length) -> None:
        key = address_of(buffer)
        assert key in self.outstanding, "free of unknown or already freed buffer"
        assert length == len(self.outstanding[key]), "free with mismatched length"
        del self.outstanding[key]
        self.freed.append((key, length))

    @staticmethod
    def _fake_png(snapshot: Dict[str, Any]) -> bytes:
        def resolve(match):
            family = match.group(1)
            struct_field = GENERIC_STRUCT_FIELDS.get(family)
            if struct_field and snapshot[struct_field]:
                family = snapshot[struct_field].encode("utf-8")
            return b'font-family="' + family + b'"'

        document = FONT_FAMILY_PATTERN.sub(resolve, snapshot["document"])
        digest = hashlib.sha256(document)
        for key in ("width", "height", "zoom", "dpi", "background"):
            digest.update(repr(snapshot[key]).encode("utf-8"))
        for font in snapshot["fonts"]:
            digest.update(hashlib.sha256(font).digest())
        return PNG_SIGNATURE + digest.digest()


class CountingAllocator:
    """
    Wraps the C runtime allocator and records acquire/release events.

    Args:
        fail_on: 1-based allocation number that should fail (None to never fail)
    """

    def __init__(self, fail_on: Optional[int] = None):
        self._inner = CAllocator()
        self.fail_on = fail_on
        self.acquire_events = 0
        self.release_events = 0
        self.live: Dict[int, Any] = {}
        self.double_frees = 0

    def malloc(self, size: int) -> Any:
        if self.fail_on is not None and self.acquire_events + 1 == self.fail_on:
            raise MarshalingError(f"malloc({size}) failed")
        address = self._inner.malloc(size)
        self.acquire_events += 1
        self.live[address_of(address)] = address
        return address

    def free(self, address: Any) -> None:
        key = address_of(address)
        if key not in self.live:
            self.double_frees += 1
            return
        del self.live[key]
        self.release_events += 1
        self._inner.free(address)

    @property
    def balanced(self) -> bool:
        return (
            self.acquire_events == self.release_events
            and not self.live
            and self.double_frees == 0
        )


@pytest.fixture
def fake_lib():
    return FakeResvgLib()


@pytest.fixture
def engine(fake_lib):
    return NativeEngine(fake_lib, source="fake")


@pytest.fixture
def allocator():
    return CountingAllocator()


@pytest.fixture
def simple_svg():
    return (
        '<svg width="100" height="50" xmlns="http://www.w3.org/2000/svg">'
        '<rect width="100" height="50" fill="red"/></svg>'
    )


@pytest.fixture
def font_a():
    return b"\x00\x01\x00\x00" + b"font-a" * 16


@pytest.fixture
def font_b():
    return b"\x00\x01\x00\x00" + b"font-b" * 8


@pytest.fixture
def font_c():
    return b"OTTO" + b"font-c" * 4
