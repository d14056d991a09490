"""A small teaching Unix: simulated Sv39 virtual memory, ELF headers, a heap, a shell and text tools."""

__version__ = "0.1.0"

__all__ = [
    "elf",
    "fileutils",
    "fmt",
    "grep",
    "ls",
    "riscv",
    "sh",
    "textutils",
    "ulib",
    "umalloc",
    "vm",
]