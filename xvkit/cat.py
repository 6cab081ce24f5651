"""Copy files to standard output, and echo arguments."""

import sys

BUFSIZE = 512


def cat(src, dst):
    """Copy everything from binary stream ``src`` to ``dst``."""
    while True:
        try:
            chunk = src.read(BUFSIZE)
        except OSError as exc:
            raise OSError("cat: read error") from exc
        if not chunk:
            return
        try:
            n = dst.write(chunk)
        except OSError as exc:
            raise OSError("cat: write error") from exc
        if n is not None and n != len(chunk):
            raise OSError("cat: write error")


def _copy_all(names, out):
    if not names:
        cat(getattr(sys.stdin, "buffer", sys.stdin), out)
        return 0
    for name in names:
        try:
            f = open(name, "rb")
        except OSError:
            print(f"cat: cannot open {name}", file=sys.stderr)
            return 1
        with f:
            cat(f, out)
    return 0


def main(argv=None):
    """Concatenate the named files, or standard input; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    sys.stdout.flush()
    out = getattr(sys.stdout, "buffer", sys.stdout)
    try:
        return _copy_all(args, out)
    except OSError as exc:
        print(exc, file=sys.stderr)
        return 1
    finally:
        out.flush()


def echo_main(argv=None):
    """Print the arguments separated by spaces; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if args:
        sys.stdout.write(" ".join(args) + "\n")
    return 0