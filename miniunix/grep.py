"""A small grep supporting the ^ . * $ operators."""

import sys

_BUFSIZE = 1024


def match(re, text):
    """Whether the pattern re matches anywhere in text."""
    if re.startswith("^"):
        return _matchhere(re, 1, text, 0)
    return any(_matchhere(re, 0, text, i) for i in range(len(text) + 1))


def _matchhere(re, ri, text, ti):
    while True:
        if ri == len(re):
            return True
        if ri + 1 < len(re) and re[ri + 1] == "*":
            return _matchstar(re[ri], re, ri + 2, text, ti)
        if re[ri] == "$" and ri + 1 == len(re):
            return ti == len(text)
        if ti < len(text) and (re[ri] == "." or re[ri] == text[ti]):
            ri += 1
            ti += 1
            continue
        return False


def _matchstar(c, re, ri, text, ti):
    while True:
        if _matchhere(re, ri, text, ti):
            return True
        if ti < len(text) and (text[ti] == c or c == "."):
            ti += 1
        else:
            return False


def grep(pattern, stream, out):
    """Write each newline-terminated line of stream that matches pattern.

    A trailing line without a newline is ignored, and reading stops once
    an unterminated line fills the line buffer.
    """
    pending = ""
    while True:
        room = _BUFSIZE - 1 - len(pending)
        if room <= 0:
            break
        chunk = stream.read(room)
        if not chunk:
            break
        pending += chunk
        *lines, pending = pending.split("\n")
        for line in lines:
            if match(pattern, line):
                out.write(line + "\n")


def main(argv=None):
    """Search standard input or the named files; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        sys.stderr.write("usage: grep pattern [file ...]\n")
        return 1
    pattern = args[0]
    if len(args) == 1:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for name in args[1:]:
        try:
            stream = open(name, encoding="utf-8", errors="replace")
        except OSError:
            sys.stdout.write(f"grep: cannot open {name}\n")
            return 1
        with stream:
            grep(pattern, stream, sys.stdout)
    return 0