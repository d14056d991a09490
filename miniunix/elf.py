"""Reading and writing ELF64 file and program headers."""

import struct
from dataclasses import dataclass
from enum import IntFlag
from typing import ClassVar

ELF_MAGIC = 0x464C457F  # "\x7FELF" read as a little-endian word
ELF_PROG_LOAD = 1


class ElfFormatError(ValueError):
    """Raised when bytes do not hold a valid ELF header."""


class ProgFlag(IntFlag):
    """Permission bits of a program header."""

    EXEC = 1
    WRITE = 2
    READ = 4


@dataclass
class ProgramHeader:
    """One program section header."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<IIQQQQQQ")

    type: int = 0
    flags: int = 0
    off: int = 0
    vaddr: int = 0
    paddr: int = 0
    filesz: int = 0
    memsz: int = 0
    align: int = 0

    @classmethod
    def parse(cls, data, offset=0):
        """Read a program header from data at offset."""
        try:
            fields = cls.FORMAT.unpack_from(data, offset)
        except struct.error as exc:
            raise ElfFormatError(f"truncated program header at {offset}") from exc
        return cls(*fields)

    def pack(self):
        """Encode this header as bytes."""
        try:
            return self.FORMAT.pack(
                self.type, self.flags, self.off, self.vaddr,
                self.paddr, self.filesz, self.memsz, self.align,
            )
        except struct.error as exc:
            raise ElfFormatError(str(exc)) from exc

    def is_loadable(self):
        """Whether the segment is to be loaded into memory."""
        return self.type == ELF_PROG_LOAD


@dataclass
class ElfHeader:
    """The ELF64 file header."""

    FORMAT: ClassVar[struct.Struct] = struct.Struct("<I12sHHIQQQIHHHHHH")

    magic: int = ELF_MAGIC
    elf: bytes = bytes(12)
    type: int = 0
    machine: int = 0
    version: int = 0
    entry: int = 0
    phoff: int = 0
    shoff: int = 0
    flags: int = 0
    ehsize: int = 0
    phentsize: int = 0
    phnum: int = 0
    shentsize: int = 0
    shnum: int = 0
    shstrndx: int = 0

    @classmethod
    def parse(cls, data):
        """Read a file header, checking its magic number."""
        try:
            fields = cls.FORMAT.unpack_from(data, 0)
        except struct.error as exc:
            raise ElfFormatError("truncated ELF header") from exc
        header = cls(*fields)
        if header.magic != ELF_MAGIC:
            raise ElfFormatError(f"bad ELF magic {header.magic:#x}")
        return header

    def pack(self):
        """Encode this header as bytes."""
        try:
            return self.FORMAT.pack(
                self.magic, bytes(self.elf), self.type, self.machine,
                self.version, self.entry, self.phoff, self.shoff, self.flags,
                self.ehsize, self.phentsize, self.phnum, self.shentsize,
                self.shnum, self.shstrndx,
            )
        except struct.error as exc:
            raise ElfFormatError(str(exc)) from exc

    def program_headers(self, data):
        """Return the program headers this file header describes in data."""
        return [
            ProgramHeader.parse(data, self.phoff + i * self.phentsize)
            for i in range(self.phnum)
        ]