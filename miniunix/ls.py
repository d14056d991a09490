"""Directory listing."""

import os
import stat
import sys

DIRSIZ = 14
_BUFSIZE = 512


def fmtname(path):
    """The last path component, blank-padded to DIRSIZ characters."""
    name = path[path.rfind("/") + 1:]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _type_code(mode):
    # The file-type field of the mode.
    return stat.S_IFMT(mode) >> 12


def _line(name, st):
    return f"{name} {_type_code(st.st_mode)} {st.st_ino} {st.st_size}\n"


def _is_plain(mode):
    return stat.S_ISREG(mode) or stat.S_ISCHR(mode) or stat.S_ISBLK(mode)


def ls(path, out):
    """Describe a file, or every entry of a directory, one line each."""
    try:
        fd = os.open(path, os.O_RDONLY)
    except OSError:
        sys.stderr.write(f"ls: cannot open {path}\n")
        return
    try:
        st = os.fstat(fd)
    except OSError:
        sys.stderr.write(f"ls: cannot stat {path}\n")
        return
    finally:
        os.close(fd)

    if _is_plain(st.st_mode):
        out.write(_line(fmtname(path), st))
    elif stat.S_ISDIR(st.st_mode):
        if len(path) + 1 + DIRSIZ + 1 > _BUFSIZE:
            out.write("ls: path too long\n")
            return
        try:
            names = sorted(os.listdir(path))
        except OSError:
            sys.stderr.write(f"ls: cannot open {path}\n")
            return
        for name in (".", "..", *names):
            entry = f"{path}/{name}"
            try:
                entry_st = os.stat(entry)
            except OSError:
                out.write(f"ls: cannot stat {entry}\n")
                continue
            out.write(_line(fmtname(entry), entry_st))


def main(argv=None):
    """List the current directory or each named path."""
    args = sys.argv[1:] if argv is None else list(argv)
    for path in args or ["."]:
        ls(path, sys.stdout)
    return 0