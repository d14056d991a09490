import pytest

from miniunix.umalloc import MIN_CORE_UNITS, UNIT, Heap


def test_sbrk_returns_old_break():
    heap = Heap(start=0x10000)
    assert heap.sbrk(0) == 0x10000
    assert heap.sbrk(100) == 0x10000
    assert heap.sbrk(-40) == 0x10000 + 100
    assert heap.sbrk(0) == 0x10000 + 60


def test_sbrk_beyond_limit_or_below_start_raises():
    heap = Heap(limit=1000)
    with pytest.raises(MemoryError):
        heap.sbrk(1001)
    with pytest.raises(MemoryError):
        heap.sbrk(-1)


def test_first_malloc_grows_by_minimum_core():
    heap = Heap()
    heap.malloc(10)
    assert heap.sbrk(0) - heap.start == MIN_CORE_UNITS * UNIT
    assert UNIT == 16


def test_blocks_are_aligned_within_arena_and_disjoint():
    heap = Heap()
    sizes = [1, 10, 100, 1000, 16, 17, 5000]
    ptrs = [heap.malloc(n) for n in sizes]
    end = heap.sbrk(0)
    spans = sorted((p, p + n) for p, n in zip(ptrs, sizes))
    for p, stop in spans:
        assert p % UNIT == 0
        assert heap.start < p and stop <= end
    for (_, a_end), (b_start, _) in zip(spans, spans[1:]):
        assert a_end <= b_start - UNIT


def test_free_all_coalesces_into_one_block():
    heap = Heap()
    ptrs = [heap.malloc(n) for n in (24, 300, 7, 4000)]
    for p in ptrs[::2] + ptrs[1::2]:
        heap.free(p)
    blocks = heap.free_blocks()
    assert blocks == [(heap.start, heap.sbrk(0) - heap.start)]


def test_free_then_malloc_reuses_block():
    heap = Heap()
    heap.malloc(64)
    p = heap.malloc(64)
    heap.free(p)
    assert heap.malloc(64) == p


def test_free_blocks_shrink_after_allocation():
    heap = Heap()
    heap.malloc(100)
    total_free = sum(size for _, size in heap.free_blocks())
    arena = heap.sbrk(0) - heap.start
    assert total_free < arena
    assert total_free % UNIT == 0


def test_large_request_grows_past_minimum():
    heap = Heap()
    big = MIN_CORE_UNITS * UNIT * 2
    p = heap.malloc(big)
    assert p + big <= heap.sbrk(0)


def test_malloc_exhaustion_raises_memory_error():
    heap = Heap(limit=MIN_CORE_UNITS * UNIT)
    with pytest.raises(MemoryError):
        heap.malloc(MIN_CORE_UNITS * UNIT)


def test_allocate_all_free_all_allocate_again():
    heap = Heap(limit=MIN_CORE_UNITS * UNIT * 8)
    ptrs = []
    with pytest.raises(MemoryError):
        while True:
            ptrs.append(heap.malloc(10001))
    assert ptrs
    for p in ptrs:
        heap.free(p)
    p = heap.malloc(1024 * 20)
    assert heap.start < p < heap.sbrk(0)


def test_free_invalid_pointer_raises():
    heap = Heap()
    with pytest.raises(ValueError):
        heap.free(heap.start + UNIT)
    heap.malloc(8)
    with pytest.raises(ValueError):
        heap.free(heap.start - 5 * UNIT)


def test_negative_size_rejected():
    heap = Heap()
    with pytest.raises(ValueError):
        heap.malloc(-1)


def test_free_blocks_empty_before_use():
    heap = Heap()
    assert heap.free_blocks() == []