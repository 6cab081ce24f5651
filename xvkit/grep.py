"""Line filter supporting the ^ . * $ regular-expression operators."""

import sys

BUFSIZE = 1024


def match(re, text):
    """Return True if ``re`` matches anywhere in ``text``."""
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
        if ti < len(text) and re[ri] in (".", text[ti]):
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
    """Write each newline-terminated line of ``stream`` that matches.

    A final line without a newline is not examined, and input stops being
    read once a single pending line fills the buffer.
    """
    pending = ""
    while True:
        room = BUFSIZE - 1 - len(pending)
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
    """Run grep over the named files or standard input; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("usage: grep pattern [file ...]", file=sys.stderr)
        return 1
    pattern, files = args[0], args[1:]
    if not files:
        grep(pattern, sys.stdin, sys.stdout)
        return 0
    for name in files:
        try:
            f = open(name, encoding="utf-8", errors="replace", newline="")
        except OSError:
            print(f"grep: cannot open {name}")
            return 1
        with f:
            grep(pattern, f, sys.stdout)
    return 0