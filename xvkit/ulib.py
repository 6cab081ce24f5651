"""Small C-style string helpers used by the user programs."""

import re

_LEADING_DIGITS = re.compile(r"[0-9]*")


def atoi(s):
    """Parse leading ASCII digits; no sign or whitespace is accepted."""
    digits = _LEADING_DIGITS.match(s).group()
    return int(digits) if digits else 0


def _cstr(s):
    data = s.encode("utf-8") if isinstance(s, str) else bytes(s)
    end = data.find(b"\0")
    return data if end < 0 else data[:end]


def strcmp(p, q):
    """Compare as unsigned bytes up to a NUL; return the byte difference."""
    a = _cstr(p) + b"\0"
    b = _cstr(q) + b"\0"
    for x, y in zip(a, b):
        if x != y or x == 0:
            return x - y
    return 0


def gets(stream, max):
    """Read one line of at most ``max - 1`` characters, keeping its terminator.

    Reading stops after a newline or carriage return, or at end of input.
    """
    empty = stream.read(0)
    parts = []
    while len(parts) + 1 < max:
        c = stream.read(1)
        if not c:
            break
        parts.append(c)
        if c in ("\n", "\r", b"\n", b"\r"):
            break
    return empty.join(parts)