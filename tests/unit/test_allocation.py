"""Unit tests for AllocationTracker."""

import pytest

from conftest import CountingAllocator
from svgraster.contexts.rendering.allocation import AllocationTracker, RegionRole
from svgraster.contexts.rendering.exceptions import MarshalingError
from svgraster.contexts.rendering.native import ffi


@pytest.mark.unit
def test_store_copies_data():
    """store() allocates a region of the right size and copies the bytes in."""
    allocator = CountingAllocator()
    tracker = AllocationTracker(allocator)

    region = tracker.store(b"white\0", RegionRole.STRING)

    assert region.size == 6
    assert region.role == RegionRole.STRING
    assert ffi.buffer(region.address, region.size)[:] == b"white\0"
    assert tracker.acquired == 1
    assert tracker.total_bytes == 6

    tracker.release_all()
    assert allocator.balanced


@pytest.mark.unit
def test_release_all_frees_each_region_once():
    """Every region is freed exactly once, and repeated calls are no-ops."""
    allocator = CountingAllocator()
    tracker = AllocationTracker(allocator)
    tracker.allocate(16, RegionRole.FONT)
    tracker.allocate(8, RegionRole.POINTER_ARRAY)
    tracker.allocate(8, RegionRole.LENGTH_ARRAY)

    assert tracker.release_all() == 3
    assert tracker.release_all() == 0

    assert tracker.acquired == tracker.released == 3
    assert tracker.regions == []
    assert allocator.balanced


@pytest.mark.unit
def test_context_manager_releases_on_exception():
    """Regions are released when the guarded block raises."""
    allocator = CountingAllocator()

    with pytest.raises(RuntimeError):
        with AllocationTracker(allocator) as tracker:
            tracker.store(b"abc\0", RegionRole.STRING)
            tracker.store(b"def\0", RegionRole.STRING)
            raise RuntimeError("boom")

    assert allocator.acquire_events == 2
    assert allocator.balanced


@pytest.mark.unit
@pytest.mark.parametrize("size", [0, -1])
def test_allocate_rejects_non_positive_size(size):
    """Zero and negative sizes are refused without touching the allocator."""
    allocator = CountingAllocator()
    tracker = AllocationTracker(allocator)

    with pytest.raises(MarshalingError):
        tracker.allocate(size, RegionRole.STRING)

    assert allocator.acquire_events == 0


@pytest.mark.unit
def test_allocator_failure_keeps_earlier_regions_tracked():
    """A failed allocation leaves previously acquired regions owned by the tracker."""
    allocator = CountingAllocator(fail_on=2)

    with pytest.raises(MarshalingError):
        with AllocationTracker(allocator) as tracker:
            tracker.store(b"one\0", RegionRole.STRING)
            tracker.store(b"two\0", RegionRole.STRING)

    assert allocator.acquire_events == 1
    assert allocator.balanced


@pytest.mark.unit
def test_region_repr_mentions_role_and_size():
    """Region repr is diagnostic: role, size and address."""
    with AllocationTracker(CountingAllocator()) as tracker:
        region = tracker.allocate(32, RegionRole.FONT)
        text = repr(region)

    assert "font" in text
    assert "32 bytes" in text
    assert "0x" in text
