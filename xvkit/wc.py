"""Count lines, words and characters."""

import sys
from dataclasses import dataclass

BUFSIZE = 512
# The NUL byte separates words too.
WHITESPACE = frozenset(" \r\t\n\v\0")


@dataclass(frozen=True)
class Counts:
    """Totals reported for one input."""

    lines: int
    words: int
    chars: int


def wc(stream):
    """Count the lines, words and characters (bytes for binary input) of ``stream``."""
    lines = words = chars = 0
    inword = False
    while True:
        chunk = stream.read(BUFSIZE)
        if not chunk:
            break
        if isinstance(chunk, (bytes, bytearray)):
            chunk = bytes(chunk).decode("latin-1")
        chars += len(chunk)
        lines += chunk.count("\n")
        for c in chunk:
            if c in WHITESPACE:
                inword = False
            elif not inword:
                words += 1
                inword = True
    return Counts(lines, words, chars)


def _report(stream, name):
    c = wc(stream)
    print(f"{c.lines} {c.words} {c.chars} {name}")


def main(argv=None):
    """Report counts for each named file, or standard input; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    try:
        if not args:
            _report(getattr(sys.stdin, "buffer", sys.stdin), "")
            return 0
        for name in args:
            try:
                f = open(name, "rb")
            except OSError:
                print(f"wc: cannot open {name}")
                return 1
            with f:
                _report(f, name)
    except OSError:
        print("wc: read error")
        return 1
    return 0