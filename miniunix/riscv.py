"""RISC-V Sv39 paging helpers, machine memory layout and system parameters."""

from enum import IntEnum, IntFlag

MASK64 = (1 << 64) - 1

# System parameters.
NPROC = 64
NCPU = 8
NOFILE = 16
NFILE = 100
NINODE = 50
NDEV = 10
ROOTDEV = 1
MAXARG = 32
MAXOPBLOCKS = 10
LOGBLOCKS = MAXOPBLOCKS * 3
NBUF = MAXOPBLOCKS * 3
FSSIZE = 2000
MAXPATH = 128
USERSTACK = 1

# Paging.
PGSIZE = 4096
PGSHIFT = 12
PXMASK = 0x1FF
# One beyond the highest virtual address; one bit less than Sv39 allows,
# so that addresses never need sign extension.
MAXVA = 1 << (9 + 9 + 9 + 12 - 1)

# Machine status register.
MSTATUS_MPP_MASK = 3 << 11
MSTATUS_MPP_M = 3 << 11
MSTATUS_MPP_S = 1 << 11
MSTATUS_MPP_U = 0 << 11

# Supervisor status register.
SSTATUS_SPP = 1 << 8
SSTATUS_SPIE = 1 << 5
SSTATUS_UPIE = 1 << 4
SSTATUS_SIE = 1 << 1
SSTATUS_UIE = 1 << 0

# Interrupt enables.
SIE_SEIE = 1 << 9
SIE_STIE = 1 << 5
MIE_STIE = 1 << 5

SATP_SV39 = 8 << 60

# Physical memory layout of the virt machine.
UART0 = 0x10000000
UART0_IRQ = 10
VIRTIO0 = 0x10001000
VIRTIO0_IRQ = 1
PLIC = 0x0C000000
PLIC_PRIORITY = PLIC + 0x0
PLIC_PENDING = PLIC + 0x1000
KERNBASE = 0x80000000
PHYSTOP = KERNBASE + 128 * 1024 * 1024

# Virtual layout: trampoline on the highest page, trapframe below it.
TRAMPOLINE = MAXVA - PGSIZE
TRAPFRAME = TRAMPOLINE - PGSIZE


class PteFlag(IntFlag):
    """Page-table entry permission bits."""

    V = 1 << 0
    R = 1 << 1
    W = 1 << 2
    X = 1 << 3
    U = 1 << 4


class OpenFlag(IntFlag):
    """Modes accepted when opening a file."""

    RDONLY = 0x000
    WRONLY = 0x001
    RDWR = 0x002
    CREATE = 0x200
    TRUNC = 0x400


class SbrkMode(IntEnum):
    """How newly requested heap memory is backed."""

    EAGER = 1
    LAZY = 2


def pg_round_up(sz):
    """Round a size up to the next page boundary."""
    return ((sz + PGSIZE - 1) & ~(PGSIZE - 1)) & MASK64


def pg_round_down(a):
    """Round an address down to its page boundary."""
    return (a & ~(PGSIZE - 1)) & MASK64


def pa2pte(pa):
    """Shift a physical address into the position it holds in a PTE."""
    return ((pa >> 12) << 10) & MASK64


def pte2pa(pte):
    """Extract the physical address a PTE refers to."""
    return ((pte >> 10) << 12) & MASK64


def pte_flags(pte):
    """Return the low ten flag bits of a PTE."""
    return pte & 0x3FF


def px_shift(level):
    """Bit position of the page-table index for the given level."""
    return PGSHIFT + 9 * level


def px(level, va):
    """Extract the 9-bit page-table index of a virtual address at a level."""
    return ((va & MASK64) >> px_shift(level)) & PXMASK


def make_satp(pagetable):
    """Build a satp value selecting Sv39 with the given root page table."""
    return SATP_SV39 | ((pagetable & MASK64) >> 12)


def kstack(p):
    """Virtual address of process slot p's kernel stack, below guard pages."""
    return TRAMPOLINE - (p + 1) * 2 * PGSIZE


def plic_senable(hart):
    """Supervisor interrupt-enable register of a hart."""
    return PLIC + 0x2080 + hart * 0x100


def plic_spriority(hart):
    """Supervisor priority-threshold register of a hart."""
    return PLIC + 0x201000 + hart * 0x2000


def plic_sclaim(hart):
    """Supervisor claim/complete register of a hart."""
    return PLIC + 0x201004 + hart * 0x2000