"""First-fit free-list allocator over a simulated program break."""

HEADER_SIZE = 16  # bytes per header unit
MIN_UNITS = 4096  # smallest request made to sbrk, in units
_BASE = 0  # the list head sits below every heap address


class Allocator:
    """A heap growing from ``start`` by at most ``limit`` bytes."""

    def __init__(self, start=0x10000, limit=1 << 20):
        if start <= 0 or start % HEADER_SIZE:
            raise ValueError("start must be a positive multiple of the header size")
        if limit < 0:
            raise ValueError("limit must not be negative")
        self.start = start
        self.limit = limit
        self.brk = start
        self._next = {}
        self._size = {}
        self._freep = None
        self._used = set()

    def sbrk(self, n):
        """Move the break by ``n`` bytes and return the old break."""
        new = self.brk + n
        if not self.start <= new <= self.start + self.limit:
            raise MemoryError("sbrk: out of memory")
        old, self.brk = self.brk, new
        return old

    def _morecore(self, nunits):
        nunits = max(nunits, MIN_UNITS)
        hp = self.sbrk(nunits * HEADER_SIZE)
        self._size[hp] = nunits
        self._used.add(hp + HEADER_SIZE)
        self.free(hp + HEADER_SIZE)
        return self._freep

    def malloc(self, nbytes):
        """Allocate ``nbytes`` and return the block's address."""
        if nbytes < 0:
            raise ValueError("nbytes must not be negative")
        nunits = (nbytes + HEADER_SIZE - 1) // HEADER_SIZE + 1
        if self._freep is None:
            self._next[_BASE] = _BASE
            self._size[_BASE] = 0
            self._freep = _BASE
        prevp = self._freep
        p = self._next[prevp]
        while True:
            if self._size[p] >= nunits:
                if self._size[p] == nunits:
                    self._next[prevp] = self._next.pop(p)
                else:
                    self._size[p] -= nunits
                    p += self._size[p] * HEADER_SIZE
                    self._size[p] = nunits
                self._freep = prevp
                self._used.add(p + HEADER_SIZE)
                return p + HEADER_SIZE
            if p == self._freep:
                p = self._morecore(nunits)
            prevp, p = p, self._next[p]

    def free(self, ap):
        """Return a block obtained from ``malloc`` to the free list."""
        if ap not in self._used:
            raise ValueError(f"free: {ap:#x} was not allocated")
        self._used.remove(ap)
        bp = ap - HEADER_SIZE
        p = self._freep
        while not p < bp < self._next[p]:
            nxt = self._next[p]
            if p >= nxt and (bp > p or bp < nxt):
                break
            p = nxt
        nxt = self._next[p]
        if bp + self._size[bp] * HEADER_SIZE == nxt:
            self._size[bp] += self._size.pop(nxt)
            self._next[bp] = self._next.pop(nxt)
        else:
            self._next[bp] = nxt
        if p + self._size[p] * HEADER_SIZE == bp:
            self._size[p] += self._size.pop(bp)
            self._next[p] = self._next.pop(bp)
        else:
            self._next[p] = bp
        self._freep = p