"""A first-fit free-list allocator over a simulated program break."""

import struct

_HEADER = struct.Struct("<QI4x")
UNIT = _HEADER.size
MIN_CORE_UNITS = 4096
_BASE = 0


class Heap:
    """Circular, address-ordered free list of blocks carved from sbrk memory.

    Addresses are integers; the list's sentinel lives at address 0 and the
    arena starts at ``start``.
    """

    def __init__(self, start=0x10000, limit=None):
        if start <= _BASE or start % UNIT:
            raise ValueError("heap start must be positive and unit-aligned")
        self.start = start
        self.limit = limit
        self._arena = bytearray()
        self._base = bytearray(UNIT)
        self._freep = None

    def sbrk(self, n):
        """Move the break by n bytes and return the old break."""
        old = self.start + len(self._arena)
        new_len = len(self._arena) + n
        if new_len < 0 or (self.limit is not None and new_len > self.limit):
            raise MemoryError("sbrk: cannot move break")
        if n > 0:
            self._arena.extend(bytes(n))
        else:
            del self._arena[new_len:]
        return old

    def _locate(self, addr):
        if addr == _BASE:
            return self._base, 0
        off = addr - self.start
        if off < 0 or off + UNIT > len(self._arena) or off % UNIT:
            raise ValueError(f"invalid heap address {addr:#x}")
        return self._arena, off

    def _ptr(self, addr):
        buf, off = self._locate(addr)
        return _HEADER.unpack_from(buf, off)[0]

    def _size(self, addr):
        buf, off = self._locate(addr)
        return _HEADER.unpack_from(buf, off)[1]

    def _set(self, addr, ptr=None, size=None):
        buf, off = self._locate(addr)
        old_ptr, old_size = _HEADER.unpack_from(buf, off)
        _HEADER.pack_into(
            buf, off,
            old_ptr if ptr is None else ptr,
            old_size if size is None else size,
        )

    def _morecore(self, nu):
        nu = max(nu, MIN_CORE_UNITS)
        hp = self.sbrk(nu * UNIT)
        self._set(hp, size=nu)
        self.free(hp + UNIT)
        return self._freep

    def malloc(self, nbytes):
        """Allocate nbytes and return the block's address; raise MemoryError if none."""
        if nbytes < 0:
            raise ValueError("negative allocation size")
        nunits = (nbytes + UNIT - 1) // UNIT + 1
        if self._freep is None:
            self._set(_BASE, ptr=_BASE, size=0)
            self._freep = _BASE
        prevp = self._freep
        p = self._ptr(prevp)
        while True:
            size = self._size(p)
            if size >= nunits:
                if size == nunits:
                    self._set(prevp, ptr=self._ptr(p))
                else:
                    self._set(p, size=size - nunits)
                    p += (size - nunits) * UNIT
                    self._set(p, size=nunits)
                self._freep = prevp
                return p + UNIT
            if p == self._freep:
                p = self._morecore(nunits)
            prevp, p = p, self._ptr(p)

    def free(self, ap):
        """Return a block obtained from malloc, merging with its neighbours."""
        if self._freep is None:
            raise ValueError("free before any allocation")
        bp = ap - UNIT
        if bp == _BASE:
            raise ValueError(f"invalid heap address {ap:#x}")
        self._locate(bp)
        p = self._freep
        while not (p < bp < self._ptr(p)):
            nxt = self._ptr(p)
            if p >= nxt and (bp > p or bp < nxt):
                break
            p = nxt
        nxt = self._ptr(p)
        if bp + self._size(bp) * UNIT == nxt:
            self._set(bp, ptr=self._ptr(nxt), size=self._size(bp) + self._size(nxt))
        else:
            self._set(bp, ptr=nxt)
        if p + self._size(p) * UNIT == bp:
            self._set(p, ptr=self._ptr(bp), size=self._size(p) + self._size(bp))
        else:
            self._set(p, ptr=bp)
        self._freep = p

    def free_blocks(self):
        """Free blocks in address order as (header address, size in bytes) pairs."""
        if self._freep is None:
            return []
        blocks = []
        p = self._ptr(_BASE)
        while p != _BASE:
            blocks.append((p, self._size(p) * UNIT))
            p = self._ptr(p)
        return blocks