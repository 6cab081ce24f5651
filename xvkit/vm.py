"""Three-level Sv39 page tables over a simulated physical memory."""

from dataclasses import dataclass

from xvkit.riscv import (
    MAXVA,
    PGSIZE,
    PTE_R,
    PTE_U,
    PTE_V,
    PTE_W,
    PTE_X,
    UINT64_MASK,
    pa2pte,
    pgrounddown,
    pgroundup,
    pte2pa,
    pte_flags,
    px,
)

PTES_PER_TABLE = 512
PTE_BYTES = 8
DEFAULT_BASE = 0x80000000


class Panic(RuntimeError):
    """An unrecoverable inconsistency, where the kernel would halt."""


class OutOfMemory(MemoryError):
    """No free physical page was available."""


class BadAddress(ValueError):
    """A user virtual address is unmapped or lacks the needed permission."""


class PhysicalMemory:
    """A pool of physical pages starting at ``base``."""

    def __init__(self, npages=1024, base=DEFAULT_BASE):
        if npages < 1:
            raise ValueError("physical memory needs at least one page")
        if base <= 0 or base % PGSIZE:
            raise ValueError("base must be a positive page-aligned address")
        self.base = base
        self.npages = npages
        self._data = bytearray(npages * PGSIZE)
        # Popping from the end hands out the lowest address first.
        self._free = [base + i * PGSIZE for i in reversed(range(npages))]
        self.allocated = set()

    def alloc(self):
        """Take one free page and return its physical address."""
        if not self._free:
            raise OutOfMemory("out of physical pages")
        pa = self._free.pop()
        self.allocated.add(pa)
        return pa

    def free(self, pa):
        """Return a page previously handed out by ``alloc``."""
        if pa % PGSIZE or not self.base <= pa < self.base + self.npages * PGSIZE:
            raise Panic("kfree")
        if pa not in self.allocated:
            raise Panic("kfree: page not allocated")
        self.allocated.remove(pa)
        self._free.append(pa)

    def _offset(self, pa, n):
        if n < 0 or pa < self.base or pa + n > self.base + self.npages * PGSIZE:
            raise ValueError(f"physical range {pa:#x}+{n} out of bounds")
        return pa - self.base

    def read(self, pa, n):
        """Read ``n`` bytes starting at physical address ``pa``."""
        off = self._offset(pa, n)
        return bytes(self._data[off:off + n])

    def write(self, pa, data):
        """Write ``data`` starting at physical address ``pa``."""
        off = self._offset(pa, len(data))
        self._data[off:off + len(data)] = data

    def load_word(self, pa):
        """Read a little-endian 64-bit word."""
        return int.from_bytes(self.read(pa, PTE_BYTES), "little")

    def store_word(self, pa, value):
        """Write a little-endian 64-bit word."""
        self.write(pa, (value & UINT64_MASK).to_bytes(PTE_BYTES, "little"))

    def _zero_page(self, pa):
        self.write(pa, bytes(PGSIZE))


@dataclass
class PageTable:
    """A page table rooted at physical page ``root`` in ``memory``."""

    memory: PhysicalMemory
    root: int

    @classmethod
    def create(cls, memory):
        """Allocate an empty page table."""
        root = memory.alloc()
        memory._zero_page(root)
        return cls(memory, root)

    def walk(self, va, alloc=False):
        """Return the physical address of the level-0 PTE for ``va``.

        Returns None when an intermediate table is missing and ``alloc`` is
        false; with ``alloc`` the missing tables are created.
        """
        if va >= MAXVA:
            raise Panic("walk")
        mem = self.memory
        table = self.root
        for level in (2, 1):
            pte_addr = table + PTE_BYTES * px(level, va)
            pte = mem.load_word(pte_addr)
            if pte & PTE_V:
                table = pte2pa(pte)
            else:
                if not alloc:
                    return None
                table = mem.alloc()
                mem._zero_page(table)
                mem.store_word(pte_addr, pa2pte(table) | PTE_V)
        return table + PTE_BYTES * px(0, va)

    def walkaddr(self, va):
        """Physical page address of a user-accessible mapping, or None."""
        if va >= MAXVA:
            return None
        pte_addr = self.walk(va, False)
        if pte_addr is None:
            return None
        pte = self.memory.load_word(pte_addr)
        if not pte & PTE_V or not pte & PTE_U:
            return None
        return pte2pa(pte)

    def mappages(self, va, size, pa, perm):
        """Map ``size`` bytes at ``va`` onto physical memory at ``pa``."""
        if va % PGSIZE:
            raise Panic("mappages: va not aligned")
        if size % PGSIZE:
            raise Panic("mappages: size not aligned")
        if size == 0:
            raise Panic("mappages: size")
        for offset in range(0, size, PGSIZE):
            pte_addr = self.walk(va + offset, True)
            if self.memory.load_word(pte_addr) & PTE_V:
                raise Panic("mappages: remap")
            self.memory.store_word(pte_addr, pa2pte(pa + offset) | perm | PTE_V)

    def unmap(self, va, npages, do_free):
        """Remove ``npages`` existing mappings from ``va``, optionally freeing them."""
        if va % PGSIZE:
            raise Panic("uvmunmap: not aligned")
        mem = self.memory
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            pte_addr = self.walk(a, False)
            if pte_addr is None:
                raise Panic("uvmunmap: walk")
            pte = mem.load_word(pte_addr)
            if not pte & PTE_V:
                raise Panic("uvmunmap: not mapped")
            if pte_flags(pte) == PTE_V:
                raise Panic("uvmunmap: not a leaf")
            if do_free:
                mem.free(pte2pa(pte))
            mem.store_word(pte_addr, 0)

    def load_first(self, src):
        """Place initial code, smaller than a page, at virtual address 0."""
        if len(src) >= PGSIZE:
            raise Panic("uvmfirst: more than a page")
        page = self.memory.alloc()
        self.memory._zero_page(page)
        self.mappages(0, PGSIZE, page, PTE_W | PTE_R | PTE_X | PTE_U)
        self.memory.write(page, bytes(src))

    def grow(self, oldsz, newsz, xperm):
        """Grow user memory from ``oldsz`` to ``newsz``; return the new size."""
        if newsz < oldsz:
            return oldsz
        start = pgroundup(oldsz)
        mem = self.memory
        for a in range(start, newsz, PGSIZE):
            try:
                page = mem.alloc()
            except OutOfMemory:
                self.shrink(a, start)
                raise
            mem._zero_page(page)
            try:
                self.mappages(a, PGSIZE, page, PTE_R | PTE_U | xperm)
            except OutOfMemory:
                mem.free(page)
                self.shrink(a, start)
                raise
        return newsz

    def shrink(self, oldsz, newsz):
        """Release user pages to bring size from ``oldsz`` down to ``newsz``."""
        if newsz >= oldsz:
            return oldsz
        if pgroundup(newsz) < pgroundup(oldsz):
            npages = (pgroundup(oldsz) - pgroundup(newsz)) // PGSIZE
            self.unmap(pgroundup(newsz), npages, True)
        return newsz

    def _freewalk(self, table):
        mem = self.memory
        for i in range(PTES_PER_TABLE):
            pte_addr = table + PTE_BYTES * i
            pte = mem.load_word(pte_addr)
            if pte & PTE_V and not pte & (PTE_R | PTE_W | PTE_X):
                self._freewalk(pte2pa(pte))
                mem.store_word(pte_addr, 0)
            elif pte & PTE_V:
                raise Panic("freewalk: leaf")
        mem.free(table)

    def destroy(self, sz):
        """Free ``sz`` bytes of user memory and then every table page."""
        if sz > 0:
            self.unmap(0, pgroundup(sz) // PGSIZE, True)
        self._freewalk(self.root)

    def copy_to(self, new, sz):
        """Copy mappings and contents of the first ``sz`` bytes into ``new``."""
        mem = self.memory
        for va in range(0, sz, PGSIZE):
            pte_addr = self.walk(va, False)
            if pte_addr is None:
                raise Panic("uvmcopy: pte should exist")
            pte = mem.load_word(pte_addr)
            if not pte & PTE_V:
                raise Panic("uvmcopy: page not present")
            try:
                page = new.memory.alloc()
            except OutOfMemory:
                new.unmap(0, va // PGSIZE, True)
                raise
            new.memory.write(page, mem.read(pte2pa(pte), PGSIZE))
            try:
                new.mappages(va, PGSIZE, page, pte_flags(pte))
            except OutOfMemory:
                new.memory.free(page)
                new.unmap(0, va // PGSIZE, True)
                raise

    def clear_user(self, va):
        """Remove user access from the mapping at ``va``."""
        pte_addr = self.walk(va, False)
        if pte_addr is None:
            raise Panic("uvmclear")
        self.memory.store_word(pte_addr, self.memory.load_word(pte_addr) & ~PTE_U)

    def copyout(self, dstva, data):
        """Copy ``data`` to user virtual address ``dstva``."""
        mem = self.memory
        view = memoryview(bytes(data))
        while view:
            va0 = pgrounddown(dstva)
            if va0 >= MAXVA:
                raise BadAddress(f"copyout: {dstva:#x} beyond MAXVA")
            pte_addr = self.walk(va0, False)
            pte = 0 if pte_addr is None else mem.load_word(pte_addr)
            if not (pte & PTE_V and pte & PTE_U and pte & PTE_W):
                raise BadAddress(f"copyout: {dstva:#x} not writable")
            n = min(PGSIZE - (dstva - va0), len(view))
            mem.write(pte2pa(pte) + (dstva - va0), view[:n])
            view = view[n:]
            dstva = va0 + PGSIZE

    def copyin(self, srcva, length):
        """Copy ``length`` bytes from user virtual address ``srcva``."""
        out = bytearray()
        while length > 0:
            va0 = pgrounddown(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise BadAddress(f"copyin: {srcva:#x} not mapped")
            n = min(PGSIZE - (srcva - va0), length)
            out += self.memory.read(pa0 + (srcva - va0), n)
            length -= n
            srcva = va0 + PGSIZE
        return bytes(out)

    def copyinstr(self, srcva, max):
        """Copy a NUL-terminated string of at most ``max`` bytes, without the NUL."""
        out = bytearray()
        while max > 0:
            va0 = pgrounddown(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise BadAddress(f"copyinstr: {srcva:#x} not mapped")
            n = min(PGSIZE - (srcva - va0), max)
            chunk = self.memory.read(pa0 + (srcva - va0), n)
            end = chunk.find(b"\0")
            if end >= 0:
                out += chunk[:end]
                return bytes(out)
            out += chunk
            max -= n
            srcva = va0 + PGSIZE
        raise BadAddress("copyinstr: string not terminated")