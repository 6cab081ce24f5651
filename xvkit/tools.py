"""Small file and process commands: mkdir, rm, ln, touch and kill."""

import os
import signal
import sys

from xvkit.ulib import atoi

KILL_SIGNAL = getattr(signal, "SIGKILL", signal.SIGTERM)


def _args(argv):
    return sys.argv[1:] if argv is None else list(argv)


def mkdir_main(argv=None):
    """Create each named directory, stopping at the first failure."""
    args = _args(argv)
    if not args:
        print("Usage: mkdir files...", file=sys.stderr)
        return 1
    for name in args:
        try:
            os.mkdir(name)
        except OSError:
            print(f"mkdir: {name} failed to create", file=sys.stderr)
            break
    return 0


def rm_main(argv=None):
    """Remove each named file or empty directory, stopping at the first failure."""
    args = _args(argv)
    if not args:
        print("Usage: rm files...", file=sys.stderr)
        return 1
    for name in args:
        try:
            if os.path.isdir(name) and not os.path.islink(name):
                os.rmdir(name)
            else:
                os.unlink(name)
        except OSError:
            print(f"rm: {name} failed to delete", file=sys.stderr)
            break
    return 0


def ln_main(argv=None):
    """Make ``new`` a hard link to ``old``."""
    args = _args(argv)
    if len(args) != 2:
        print("Usage: ln old new", file=sys.stderr)
        return 1
    old, new = args
    try:
        os.link(old, new)
    except OSError:
        print(f"link {old} {new}: failed", file=sys.stderr)
    return 0


def touch_main(argv=None):
    """Create the named file if it does not exist."""
    args = _args(argv)
    if not args:
        print("Write: touch <filename>")
        return 1
    try:
        fd = os.open(args[0], os.O_CREAT | os.O_RDWR, 0o666)
    except OSError:
        print(f"touch: cannot create {args[0]}")
        return 1
    os.close(fd)
    return 0


def kill_main(argv=None):
    """Kill each process whose id is given; failures are ignored."""
    args = _args(argv)
    if not args:
        print("usage: kill pid...", file=sys.stderr)
        return 1
    for arg in args:
        pid = atoi(arg)
        if pid <= 0:
            continue  # no such process
        try:
            os.kill(pid, KILL_SIGNAL)
        except OSError:
            pass
    return 0