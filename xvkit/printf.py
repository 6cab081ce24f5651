"""Minimal formatted output understanding %d, %u, %x, %p, %s and %%.

Integer conversions, including the ``l`` and ``ll`` forms, print the low
32 bits of their argument. Hex digits are upper case.
"""

import operator
import re
import sys

_DIGITS = "0123456789ABCDEF"
_UINT32 = 0xFFFFFFFF
_UINT64 = (1 << 64) - 1

_DIRECTIVE = re.compile(r"%(ll[dux]|l[dux]|[duxps%]|(.)|$)", re.DOTALL)


def _printint(value, base, signed):
    x = operator.index(value) & _UINT32
    negative = signed and x & 0x80000000
    if negative:
        x = (1 << 32) - x
    digits = []
    while True:
        digits.append(_DIGITS[x % base])
        x //= base
        if x == 0:
            break
    if negative:
        digits.append("-")
    return "".join(reversed(digits))


def _printptr(value):
    return "0x" + format(operator.index(value) & _UINT64, "016X")


def _printstr(value):
    if value is None:
        return "(null)"
    if isinstance(value, (bytes, bytearray)):
        return bytes(value).decode("latin-1")
    return str(value)


def sprintf(fmt, *args):
    """Format ``args`` according to ``fmt`` and return the text."""
    remaining = iter(args)

    def take():
        try:
            return next(remaining)
        except StopIteration:
            raise TypeError("not enough arguments for format string") from None

    def expand(m):
        spec = m.group(1)
        if spec == "":
            return ""  # a lone '%' at the end prints nothing
        if m.group(2) is not None:
            return "%" + spec  # unknown sequence: print it to draw attention
        if spec == "%":
            return "%"
        if spec == "s":
            return _printstr(take())
        if spec == "p":
            return _printptr(take())
        conv = spec[-1]
        if conv == "d":
            return _printint(take(), 10, True)
        if conv == "u":
            return _printint(take(), 10, False)
        return _printint(take(), 16, False)

    return _DIRECTIVE.sub(expand, fmt)


def fprintf(stream, fmt, *args):
    """Write formatted text to ``stream``."""
    stream.write(sprintf(fmt, *args))


def printf(fmt, *args):
    """Write formatted text to standard output."""
    fprintf(sys.stdout, fmt, *args)