# miniunix

A small teaching Unix written in plain Python, with no runtime dependencies.
It models the parts of a simple RISC-V kernel and its user programs that make
sense without a machine underneath:

- `miniunix.riscv` — system parameters, page-size arithmetic
  (`pg_round_up`, `pg_round_down`), PTE encoding (`pa2pte`, `pte2pa`,
  `pte_flags`), Sv39 index extraction (`px`, `px_shift`), `make_satp`, the
  physical and virtual memory layout (`KERNBASE`, `PHYSTOP`, `TRAMPOLINE`,
  `TRAPFRAME`, `kstack`, the `plic_*` helpers), and the flag sets `PteFlag`,
  `OpenFlag` and `SbrkMode`.
- `miniunix.elf` — `ElfHeader` and `ProgramHeader` dataclasses that parse and
  pack 64-bit little-endian ELF headers; `ElfFormatError` is raised for
  truncated data or a bad magic number.
- `miniunix.vm` — `PhysicalMemory`, a pool of page frames, and `PageTable`, a
  three-level Sv39 page table stored in that memory, with `walk`,
  `walkaddr`, `map_pages`, `unmap`, `grow`, `shrink`, `destroy`,
  `copy_into`, `clear_user`, `copy_out`, `copy_in`, `copy_in_str`, lazy
  `fault` and `is_mapped`; `make_kernel_pagetable` builds the kernel's
  direct map. Failures raise `VirtualMemoryError` or `OutOfMemoryError`.
- `miniunix.umalloc` — `Heap`, a first-fit, address-ordered free-list
  allocator over a simulated program break (`sbrk`, `malloc`, `free`,
  `free_blocks`). `malloc` raises `MemoryError` when the break cannot move.
- `miniunix.fmt` — `format_string`, `fprintf` and `printf`, understanding
  `%d %u %x` with their `l`/`ll` forms, `%p`, `%c`, `%s` and `%%`; unknown
  sequences are printed as they are.
- `miniunix.ulib` — `atoi`, `strcmp`, `gets`, `do_rand` and the
  `ParkMiller` random generator.
- `miniunix.sh` — `gettoken` and `parse_command`, which turn a command line
  with `|`, `;`, `&`, `<`, `>`, `>>` and parentheses into `ExecCmd`,
  `RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd` objects
  (`ShellSyntaxError` on bad input), and `Shell`, which runs them.
- `miniunix.grep`, `miniunix.textutils`, `miniunix.ls`,
  `miniunix.fileutils` — the small commands below.

## Install

```
pip install .
```

## Commands

Each tool is installed as a console command:

```
miniunix-echo hello world
miniunix-cat notes.txt
miniunix-wc notes.txt
miniunix-grep '^ab*c$' notes.txt
miniunix-ls .
miniunix-mkdir newdir
miniunix-ln old new
miniunix-rm new
miniunix-kill 1234
```

- `miniunix-grep` supports only `^`, `.`, `*` and `$`, and prints only
  newline-terminated matching lines. With no file it reads standard input,
  as do `miniunix-cat` and `miniunix-wc`.
- `miniunix-wc` prints lines, words and characters, then the name.
- `miniunix-ls` prints, for a file or for each directory entry (including
  `.` and `..`, then the names in sorted order), the name padded to 14
  characters, the file-type code taken from the mode, the inode number and
  the size.
- `miniunix-rm` removes files and empty directories; it and `miniunix-mkdir`
  stop at the first failure.
- `miniunix-kill` sends `SIGKILL` (or `SIGTERM` where there is none) to each
  id, silently skipping ids that are not positive and failures.

## Library use

Page tables over simulated memory:

```python
from miniunix.riscv import PteFlag
from miniunix.vm import PhysicalMemory, PageTable

memory = PhysicalMemory()
table = PageTable(memory)
size = table.grow(0, 8192, PteFlag.W)
table.copy_out(100, b"hello", size)
assert table.copy_in(100, 5, size) == b"hello"
```

A heap:

```python
from miniunix.umalloc import Heap

heap = Heap()
block = heap.malloc(100)
heap.free(block)
print(heap.free_blocks())
```

Formatting:

```python
from miniunix.fmt import format_string

format_string("%d items at %p", 3, 0x1000)  # '3 items at 0x0000000000001000'
```

Parsing and running a shell line:

```python
import io
from miniunix.sh import Shell, parse_command

cmd = parse_command("echo hi | grep h")
out = io.StringIO()
Shell().run(cmd, io.StringIO(), out)
assert out.getvalue() == "hi\n"
```

## What it does not do

There is no kernel, process table, scheduler or file system here: the
page tables and heap work on simulated memory only, and nothing loads or
runs ELF programs. `Shell` runs its commands as Python callables in the
same process — by default `echo`, `cat`, `grep` and `wc` — plus the `cd`
built-in; it never starts other programs. A pipe collects all output of
its left side before the right side runs, and `&` commands run to
completion before the shell goes on. There is no shell console command;
use `Shell.repl` from Python.

## Tests

```
pip install .[test]
pytest
```