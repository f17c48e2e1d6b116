"""
Allocation Tracker

Owns every unmanaged region obtained while marshaling a single render call.
Regions are registered the moment they are allocated and released exactly once by
release_all(), which runs on every exit path when the tracker is used as a context
manager:

    with AllocationTracker() as tracker:
        region = tracker.store(b"white\\0", RegionRole.STRING)
        ...
    # every region is freed here, whether or not the block raised
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, List, Optional

from svgraster.contexts.rendering.exceptions import MarshalingError
from svgraster.contexts.rendering.native import address_of, ffi, load_libc


class RegionRole(Enum):
    """What a region holds. Diagnostic only."""

    STRING = "string"
    FONT = "font"
    POINTER_ARRAY = "pointer_array"
    LENGTH_ARRAY = "length_array"


@dataclass(frozen=True)
class AllocatedRegion:
    """
    One unmanaged memory span owned by the current render call.

    Attributes:
        address: cffi void * returned by the allocator
        size: Size in bytes
        role: What the region holds
    """

    address: Any
    size: int
    role: RegionRole

    def __repr__(self) -> str:
        return f"AllocatedRegion({self.role.value}, {self.size} bytes @ {address_of(self.address):#x})"


class CAllocator:
    """malloc/free from the C runtime."""

    def __init__(self, libc: Any = None):
        self._libc = libc

    @property
    def libc(self) -> Any:
        if self._libc is None:
            self._libc = load_libc()
        return self._libc

    def malloc(self, size: int) -> Any:
        address = self.libc.malloc(size)
        if address == ffi.NULL:
            raise MarshalingError(f"malloc({size}) failed")
        return address

    def free(self, address: Any) -> None:
        self.libc.free(address)


class AllocationTracker:
    """
    Explicit ownership list for the unmanaged regions of one render call.

    Not thread-safe and not reusable across calls: create one per call.

    Attributes:
        acquired: Number of regions allocated so far
        released: Number of regions freed so far
    """

    def __init__(self, allocator: Optional[Any] = None):
        self._allocator = allocator if allocator is not None else CAllocator()
        self._regions: List[AllocatedRegion] = []
        self.acquired = 0
        self.released = 0

    @property
    def regions(self) -> List[AllocatedRegion]:
        """Regions currently owned (a copy)."""
        return list(self._regions)

    @property
    def total_bytes(self) -> int:
        return sum(region.size for region in self._regions)

    def allocate(self, size: int, role: RegionRole) -> AllocatedRegion:
        """
        Allocate an uninitialized region and take ownership of it.

        Raises:
            MarshalingError: If size is not positive or the allocator fails
        """
        if size <= 0:
            raise MarshalingError(f"Refusing to allocate {size} bytes for {role.value} region")

        address = self._allocator.malloc(size)
        region = AllocatedRegion(address=address, size=size, role=role)
        self._regions.append(region)
        self.acquired += 1
        return region

    def store(self, data: bytes, role: RegionRole) -> AllocatedRegion:
        """Allocate a region sized for data and copy data into it."""
        region = self.allocate(len(data), role)
        ffi.memmove(region.address, data, len(data))
        return region

    def release_all(self) -> int:
        """
        Free every owned region exactly once.

        Safe to call repeatedly; regions are forgotten as they are freed.

        Returns:
            Number of regions freed by this call
        """
        count = 0
        while self._regions:
            region = self._regions.pop()
            self._allocator.free(region.address)
            self.released += 1
            count += 1
        return count

    def __enter__(self) -> "AllocationTracker":
        return self

    def __exit__(self, exc_type, exc_value, traceback) -> None:
        self.release_all()
