import pytest

from xvkit.umalloc import HEADER_SIZE, MIN_UNITS, Allocator


def test_first_malloc_grows_break_by_minimum():
    heap = Allocator()
    addr = heap.malloc(10)
    assert heap.brk - heap.start == MIN_UNITS * HEADER_SIZE
    assert heap.start < addr < heap.brk
    assert addr % HEADER_SIZE == 0


def test_blocks_do_not_overlap():
    heap = Allocator()
    sizes = [1, 17, 100, 1000, 5000, 33]
    blocks = sorted((heap.malloc(n), n) for n in sizes)
    for (a, n), (b, _) in zip(blocks, blocks[1:]):
        assert a + n <= b - HEADER_SIZE
    for a, n in blocks:
        assert heap.start < a and a + n <= heap.brk


def test_free_then_malloc_reuses_block():
    heap = Allocator()
    a = heap.malloc(200)
    heap.malloc(50)
    heap.free(a)
    assert heap.malloc(200) == a


def test_free_coalesces_neighbours():
    heap = Allocator(limit=MIN_UNITS * HEADER_SIZE)
    a = heap.malloc(30000)
    b = heap.malloc(30000)
    heap.free(a)
    heap.free(b)
    brk = heap.brk
    c = heap.malloc(60000)
    assert heap.brk == brk
    assert heap.start < c < heap.brk


def test_large_request_beyond_minimum():
    heap = Allocator()
    n = MIN_UNITS * HEADER_SIZE * 2
    addr = heap.malloc(n)
    assert addr + n <= heap.brk


def test_exhaustion_raises_memory_error():
    heap = Allocator(limit=MIN_UNITS * HEADER_SIZE)
    with pytest.raises(MemoryError):
        heap.malloc(MIN_UNITS * HEADER_SIZE)


def test_free_unknown_or_twice_raises():
    heap = Allocator()
    a = heap.malloc(8)
    with pytest.raises(ValueError):
        heap.free(a + HEADER_SIZE)
    heap.free(a)
    with pytest.raises(ValueError):
        heap.free(a)


def test_sbrk_returns_old_break_and_checks_bounds():
    heap = Allocator(start=0x1000, limit=0x2000)
    assert heap.sbrk(0x100) == 0x1000
    assert heap.sbrk(0) == 0x1100
    assert heap.sbrk(-0x100) == 0x1100
    assert heap.brk == 0x1000
    with pytest.raises(MemoryError):
        heap.sbrk(-1)
    with pytest.raises(MemoryError):
        heap.sbrk(0x2001)


def test_bad_start_rejected():
    with pytest.raises(ValueError):
        Allocator(start=0)
    with pytest.raises(ValueError):
        Allocator(start=0x1001)