"""
Result Transfer

Moves the PNG produced by the native engine into caller-owned bytes. Acquisition
(the successful native call), the copy, and the native release form one scope: the
native buffer is released exactly once with the address/length pair it was returned
with, even when the copy fails.
"""

from contextlib import contextmanager
from typing import Any, Iterator

from svgraster.contexts.rendering.native import NativeEngine, ffi


@contextmanager
def native_output(engine: NativeEngine, address: Any, length: int) -> Iterator[Any]:
    """Yield a view of the native output buffer, then release it."""
    try:
        yield ffi.buffer(address, length)
    finally:
        engine.free_output_buffer(address, length)


def _copy_output(view: Any) -> bytes:
    return view[:]


def take_output(engine: NativeEngine, address: Any, length: int) -> bytes:
    """
    Copy a successful native output buffer into bytes and release the native buffer.

    Args:
        engine: Engine that produced the buffer
        address: uint8_t * returned by render()
        length: Byte length returned by render()

    Returns:
        Exactly ``length`` bytes of PNG data
    """
    with native_output(engine, address, length) as view:
        return _copy_output(view)
