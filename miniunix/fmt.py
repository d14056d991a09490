"""Minimal printf supporting %d, %u, %x (with l/ll), %p, %c, %s and %%."""

import re
import sys

_DIRECTIVE = re.compile(r"%(ll[dux]|l[dux]|.)?", re.DOTALL)

# conversion -> (bit width, signed, base)
_INTEGER = {
    "d": (32, True, 10),
    "ld": (64, True, 10),
    "lld": (64, True, 10),
    "u": (32, False, 10),
    "lu": (64, False, 10),
    "llu": (64, False, 10),
    "x": (32, False, 16),
    "lx": (64, False, 16),
    "llx": (64, False, 16),
}


def _unsigned(value, bits):
    return value & ((1 << bits) - 1)


def _signed(value, bits):
    value = _unsigned(value, bits)
    return value - (1 << bits) if value >> (bits - 1) else value


def format_string(fmt, *args):
    """Render fmt with args the way the console printf does."""
    values = iter(args)

    def take():
        try:
            return next(values)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def render(m):
        spec = m.group(1)
        if spec is None:
            return ""
        if spec in _INTEGER:
            bits, signed, base = _INTEGER[spec]
            raw = int(take())
            value = _signed(raw, bits) if signed else _unsigned(raw, bits)
            return str(value) if base == 10 else f"{value:X}"
        if spec == "p":
            return f"0x{_unsigned(int(take()), 64):016X}"
        if spec == "c":
            value = take()
            if isinstance(value, str):
                return value[:1]
            return chr(int(value) & 0xFF)
        if spec == "s":
            value = take()
            if value is None:
                return "(null)"
            if isinstance(value, (bytes, bytearray)):
                value = bytes(value).decode("latin-1")
            return str(value).split("\0", 1)[0]
        if spec == "%":
            return "%"
        # Unknown sequence: print it to draw attention.
        return "%" + spec

    return _DIRECTIVE.sub(render, fmt)


def fprintf(stream, fmt, *args):
    """Write the formatted text to a text stream."""
    stream.write(format_string(fmt, *args))


def printf(fmt, *args):
    """Write the formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)