"""Word counting, file concatenation and argument echoing."""

import sys
from dataclasses import dataclass

_CHUNK = 512
# A NUL byte also ends a word.
_WHITESPACE = frozenset(" \r\t\n\v\0")


@dataclass(frozen=True)
class WordCount:
    """Line, word and character totals."""

    lines: int = 0
    words: int = 0
    chars: int = 0


def count(stream):
    """Count lines, words and characters of a text stream."""
    lines = words = chars = 0
    inword = False
    while chunk := stream.read(_CHUNK):
        for ch in chunk:
            chars += 1
            if ch == "\n":
                lines += 1
            if ch in _WHITESPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return WordCount(lines, words, chars)


def cat(src, dst):
    """Copy src to dst and return the number of characters copied."""
    total = 0
    while chunk := src.read(_CHUNK):
        dst.write(chunk)
        total += len(chunk)
    return total


def echo(args):
    """The text echo prints: arguments joined by spaces, then a newline."""
    return " ".join(args) + "\n" if args else ""


def _args(argv):
    return sys.argv[1:] if argv is None else list(argv)


def _open(name):
    return open(name, encoding="utf-8", errors="replace")


def wc_main(argv=None):
    """Print counts for standard input or each named file."""
    args = _args(argv)

    def report(stream, name):
        try:
            result = count(stream)
        except OSError:
            sys.stdout.write("wc: read error\n")
            return False
        sys.stdout.write(f"{result.lines} {result.words} {result.chars} {name}\n")
        return True

    if not args:
        return 0 if report(sys.stdin, "") else 1
    for name in args:
        try:
            stream = _open(name)
        except OSError:
            sys.stdout.write(f"wc: cannot open {name}\n")
            return 1
        with stream:
            if not report(stream, name):
                return 1
    return 0


def cat_main(argv=None):
    """Copy standard input or each named file to standard output."""
    args = _args(argv)

    def copy(stream):
        try:
            cat(stream, sys.stdout)
        except OSError:
            sys.stderr.write("cat: read error\n")
            return False
        return True

    if not args:
        return 0 if copy(sys.stdin) else 1
    for name in args:
        try:
            stream = _open(name)
        except OSError:
            sys.stderr.write(f"cat: cannot open {name}\n")
            return 1
        with stream:
            if not copy(stream):
                return 1
    return 0


def echo_main(argv=None):
    """Print the arguments."""
    sys.stdout.write(echo(_args(argv)))
    return 0