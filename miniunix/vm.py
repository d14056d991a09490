"""Simulated physical memory and Sv39 page tables with user-memory copying."""

import struct

from .riscv import (
    MASK64,
    MAXVA,
    PGSIZE,
    PHYSTOP,
    PLIC,
    TRAMPOLINE,
    UART0,
    VIRTIO0,
    KERNBASE,
    PteFlag,
    pa2pte,
    pg_round_down,
    pg_round_up,
    pte2pa,
    pte_flags,
    px,
)

_PTE_SIZE = 8
_PTES_PER_PAGE = PGSIZE // _PTE_SIZE
_WORDS = struct.Struct(f"<{_PTES_PER_PAGE}Q")
_JUNK_FILL = 5
_LEAF_BITS = PteFlag.R | PteFlag.W | PteFlag.X


class VirtualMemoryError(Exception):
    """Raised on an invalid mapping request or a failed user-memory access."""


class OutOfMemoryError(MemoryError):
    """Raised when no physical page is left to allocate."""


class PhysicalMemory:
    """A pool of page-sized frames addressed by physical address."""

    def __init__(self, npages=1024, base=KERNBASE):
        if base % PGSIZE:
            raise ValueError("physical memory base must be page-aligned")
        self.base = base
        self.npages = npages
        self._pages = {}
        # Freed from low to high, so the highest page is handed out first.
        self._free = [base + i * PGSIZE for i in range(npages)]

    def alloc(self):
        """Hand out one page, filled with junk; raise OutOfMemoryError when empty."""
        if not self._free:
            raise OutOfMemoryError("out of physical pages")
        pa = self._free.pop()
        self._pages[pa] = bytearray([_JUNK_FILL]) * PGSIZE
        return pa

    def free(self, pa):
        """Return a page previously handed out by alloc."""
        if pa % PGSIZE or not self.base <= pa < self.base + self.npages * PGSIZE:
            raise VirtualMemoryError(f"kfree: bad address {pa:#x}")
        if pa not in self._pages:
            raise VirtualMemoryError(f"kfree: page {pa:#x} is not allocated")
        del self._pages[pa]
        self._free.append(pa)

    def _page(self, pa):
        try:
            return self._pages[pg_round_down(pa)]
        except KeyError:
            raise VirtualMemoryError(f"no physical page at {pa:#x}") from None

    def read(self, pa, n):
        """Read n bytes starting at physical address pa."""
        out = bytearray()
        while n > 0:
            page = self._page(pa)
            off = pa % PGSIZE
            k = min(n, PGSIZE - off)
            out += page[off:off + k]
            pa += k
            n -= k
        return bytes(out)

    def write(self, pa, data):
        """Write bytes starting at physical address pa."""
        data = memoryview(bytes(data))
        while data:
            page = self._page(pa)
            off = pa % PGSIZE
            k = min(len(data), PGSIZE - off)
            page[off:off + k] = data[:k]
            pa += k
            data = data[k:]

    def read_word(self, pa):
        """Read a little-endian 64-bit word."""
        return int.from_bytes(self.read(pa, 8), "little")

    def write_word(self, pa, value):
        """Write a little-endian 64-bit word."""
        self.write(pa, (value & MASK64).to_bytes(8, "little"))

    def free_pages(self):
        """Number of pages still available."""
        return len(self._free)


class PageTable:
    """A three-level Sv39 page table whose pages live in a PhysicalMemory."""

    def __init__(self, memory, root=None):
        self.memory = memory
        if root is None:
            root = memory.alloc()
            memory.write(root, bytes(PGSIZE))
        self.root = root

    def _zeroed_page(self):
        pa = self.memory.alloc()
        self.memory.write(pa, bytes(PGSIZE))
        return pa

    def _pte(self, va):
        addr = self.walk(va, False)
        return None if addr is None else self.memory.read_word(addr)

    def walk(self, va, alloc=False):
        """Return the physical address of va's leaf PTE, or None if absent.

        With alloc, missing page-table pages are created.
        """
        if va >= MAXVA:
            raise VirtualMemoryError("walk")
        table = self.root
        for level in (2, 1):
            addr = table + px(level, va) * _PTE_SIZE
            pte = self.memory.read_word(addr)
            if pte & PteFlag.V:
                table = pte2pa(pte)
            else:
                if not alloc:
                    return None
                table = self._zeroed_page()
                self.memory.write_word(addr, pa2pte(table) | PteFlag.V)
        return table + px(0, va) * _PTE_SIZE

    def walkaddr(self, va):
        """Physical page address of a user-accessible va, or None."""
        if va >= MAXVA:
            return None
        pte = self._pte(va)
        if pte is None or not pte & PteFlag.V or not pte & PteFlag.U:
            return None
        return pte2pa(pte)

    def map_pages(self, va, size, pa, perm):
        """Map [va, va+size) onto physical pages starting at pa."""
        if va % PGSIZE:
            raise VirtualMemoryError("mappages: va not aligned")
        if size % PGSIZE:
            raise VirtualMemoryError("mappages: size not aligned")
        if size == 0:
            raise VirtualMemoryError("mappages: size")
        last = va + size - PGSIZE
        a = va
        while True:
            addr = self.walk(a, True)
            if self.memory.read_word(addr) & PteFlag.V:
                raise VirtualMemoryError("mappages: remap")
            self.memory.write_word(addr, pa2pte(pa) | int(perm) | PteFlag.V)
            if a == last:
                break
            a += PGSIZE
            pa += PGSIZE

    def unmap(self, va, npages, do_free):
        """Remove npages of mappings from va, optionally freeing their frames."""
        if va % PGSIZE:
            raise VirtualMemoryError("uvmunmap: not aligned")
        for a in range(va, va + npages * PGSIZE, PGSIZE):
            addr = self.walk(a, False)
            if addr is None:
                continue
            pte = self.memory.read_word(addr)
            if not pte & PteFlag.V:
                continue
            if do_free:
                self.memory.free(pte2pa(pte))
            self.memory.write_word(addr, 0)

    def grow(self, oldsz, newsz, xperm):
        """Allocate zeroed user pages to grow from oldsz to newsz; return newsz."""
        if newsz < oldsz:
            return oldsz
        oldsz = pg_round_up(oldsz)
        for a in range(oldsz, newsz, PGSIZE):
            try:
                mem = self._zeroed_page()
            except OutOfMemoryError:
                self.shrink(a, oldsz)
                raise
            try:
                self.map_pages(a, PGSIZE, mem, PteFlag.R | PteFlag.U | int(xperm))
            except OutOfMemoryError:
                self.memory.free(mem)
                self.shrink(a, oldsz)
                raise
        return newsz

    def shrink(self, oldsz, newsz):
        """Free user pages to bring the size from oldsz down to newsz."""
        if newsz >= oldsz:
            return oldsz
        if pg_round_up(newsz) < pg_round_up(oldsz):
            npages = (pg_round_up(oldsz) - pg_round_up(newsz)) // PGSIZE
            self.unmap(pg_round_up(newsz), npages, True)
        return newsz

    def _freewalk(self, table):
        for i, pte in enumerate(_WORDS.unpack(self.memory.read(table, PGSIZE))):
            if pte & PteFlag.V and not pte & _LEAF_BITS:
                self._freewalk(pte2pa(pte))
                self.memory.write_word(table + i * _PTE_SIZE, 0)
            elif pte & PteFlag.V:
                raise VirtualMemoryError("freewalk: leaf")
        self.memory.free(table)

    def destroy(self, sz):
        """Free sz bytes of user memory, then every page-table page."""
        if sz > 0:
            self.unmap(0, pg_round_up(sz) // PGSIZE, True)
        self._freewalk(self.root)

    def copy_into(self, other, sz):
        """Copy the first sz bytes of mappings and memory into another table."""
        i = 0
        try:
            for i in range(0, sz, PGSIZE):
                pte = self._pte(i)
                if pte is None or not pte & PteFlag.V:
                    continue
                mem = self.memory.alloc()
                self.memory.write(mem, self.memory.read(pte2pa(pte), PGSIZE))
                try:
                    other.map_pages(i, PGSIZE, mem, pte_flags(pte))
                except OutOfMemoryError:
                    self.memory.free(mem)
                    raise
        except OutOfMemoryError:
            other.unmap(0, i // PGSIZE, True)
            raise

    def clear_user(self, va):
        """Make the page at va inaccessible to user mode."""
        addr = self.walk(va, False)
        if addr is None:
            raise VirtualMemoryError("uvmclear")
        self.memory.write_word(addr, self.memory.read_word(addr) & ~PteFlag.U)

    def copy_out(self, dstva, data, proc_size=0):
        """Copy bytes into user memory at dstva, faulting in lazy pages."""
        data = bytes(data)
        pos = 0
        while pos < len(data):
            va0 = pg_round_down(dstva)
            if va0 >= MAXVA:
                raise VirtualMemoryError(f"copyout: bad address {dstva:#x}")
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                pa0 = self.fault(va0, proc_size)
                if pa0 is None:
                    raise VirtualMemoryError(f"copyout: bad address {dstva:#x}")
            if not self._pte(va0) & PteFlag.W:
                raise VirtualMemoryError(f"copyout: read-only page {va0:#x}")
            n = min(PGSIZE - (dstva - va0), len(data) - pos)
            self.memory.write(pa0 + (dstva - va0), data[pos:pos + n])
            pos += n
            dstva = va0 + PGSIZE

    def copy_in(self, srcva, length, proc_size=0):
        """Copy length bytes out of user memory at srcva."""
        out = bytearray()
        while length > 0:
            va0 = pg_round_down(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                pa0 = self.fault(va0, proc_size)
                if pa0 is None:
                    raise VirtualMemoryError(f"copyin: bad address {srcva:#x}")
            n = min(PGSIZE - (srcva - va0), length)
            out += self.memory.read(pa0 + (srcva - va0), n)
            length -= n
            srcva = va0 + PGSIZE
        return bytes(out)

    def copy_in_str(self, srcva, max):
        """Copy a NUL-terminated string of at most max bytes; return it without the NUL."""
        out = bytearray()
        while max > 0:
            va0 = pg_round_down(srcva)
            pa0 = self.walkaddr(va0)
            if pa0 is None:
                raise VirtualMemoryError(f"copyinstr: bad address {srcva:#x}")
            n = min(PGSIZE - (srcva - va0), max)
            chunk = self.memory.read(pa0 + (srcva - va0), n)
            nul = chunk.find(0)
            if nul >= 0:
                out += chunk[:nul]
                return bytes(out)
            out += chunk
            max -= n
            srcva = va0 + PGSIZE
        raise VirtualMemoryError("copyinstr: no terminating NUL")

    def fault(self, va, proc_size):
        """Back a lazily allocated page below proc_size.

        Returns the new physical page, or None if va is out of range,
        already mapped, or memory is exhausted.
        """
        if va >= proc_size:
            return None
        va = pg_round_down(va)
        if self.is_mapped(va):
            return None
        try:
            mem = self._zeroed_page()
        except OutOfMemoryError:
            return None
        try:
            self.map_pages(va, PGSIZE, mem, PteFlag.W | PteFlag.U | PteFlag.R)
        except OutOfMemoryError:
            self.memory.free(mem)
            return None
        return mem

    def is_mapped(self, va):
        """Whether va has a valid leaf PTE."""
        pte = self._pte(va)
        return pte is not None and bool(pte & PteFlag.V)


def make_kernel_pagetable(memory, etext, trampoline):
    """Build the kernel's direct-map page table."""
    kpgtbl = PageTable(memory)

    def kvmmap(va, pa, sz, perm):
        try:
            kpgtbl.map_pages(va, sz, pa, perm)
        except OutOfMemoryError as exc:
            raise VirtualMemoryError("kvmmap") from exc

    rw = PteFlag.R | PteFlag.W
    rx = PteFlag.R | PteFlag.X
    kvmmap(UART0, UART0, PGSIZE, rw)
    kvmmap(VIRTIO0, VIRTIO0, PGSIZE, rw)
    kvmmap(PLIC, PLIC, 0x4000000, rw)
    kvmmap(KERNBASE, KERNBASE, etext - KERNBASE, rx)
    kvmmap(etext, etext, PHYSTOP - etext, rw)
    kvmmap(TRAMPOLINE, trampoline, PGSIZE, rx)
    return kpgtbl