"""Small C-library routines: number parsing, string comparison, line input and rand."""

import re

_DIGITS = re.compile(r"[0-9]*")
_MASK64 = (1 << 64) - 1


def _to_int32(n):
    n &= 0xFFFFFFFF
    return n - (1 << 32) if n >> 31 else n


def atoi(s):
    """Parse leading decimal digits; no sign or whitespace is accepted."""
    digits = _DIGITS.match(s).group()
    return _to_int32(int(digits)) if digits else 0


def _c_bytes(s):
    data = s.encode() if isinstance(s, str) else bytes(s)
    return data.split(b"\0", 1)[0]


def strcmp(p, q):
    """Compare two NUL-terminated strings as unsigned bytes."""
    a = _c_bytes(p) + b"\0"
    b = _c_bytes(q) + b"\0"
    for x, y in zip(a, b):
        if x != y or x == 0:
            return x - y
    return 0


def gets(stream, max):
    """Read up to max-1 characters, stopping after a newline or carriage return."""
    chunks = []
    empty = ""
    while len(chunks) + 1 < max:
        c = stream.read(1)
        empty = c[:0]
        if not c:
            break
        chunks.append(c)
        if c in ("\n", "\r", b"\n", b"\r"):
            break
    return empty.join(chunks)


def do_rand(ctx):
    """Park-Miller step: return the next state, which is also the random value."""
    x = ((ctx & _MASK64) % 0x7FFFFFFE) + 1
    hi, lo = divmod(x, 127773)
    x = 16807 * lo - 2836 * hi
    if x < 0:
        x += 0x7FFFFFFF
    return x - 1


class ParkMiller:
    """Minimal-standard random generator yielding values in [0, 0x7ffffffd]."""

    def __init__(self, seed=1):
        self.state = seed

    def next(self):
        self.state = do_rand(self.state)
        return self.state

    def __iter__(self):
        return self

    def __next__(self):
        return self.next()