"""List files with their type, inode number and size."""

import os
import stat
import sys
from enum import IntEnum

DIRSIZ = 14
BUFSIZE = 512


class FileType(IntEnum):
    """Inode types as stored on disk and reported by ls."""

    T_DIR = 1
    T_FILE = 2
    T_DEVICE = 3


def fmtname(path):
    """Last path component, blank-padded to DIRSIZ characters."""
    name = path[path.rfind("/") + 1:]
    if len(name) >= DIRSIZ:
        return name
    return name.ljust(DIRSIZ)


def _describe(path):
    st = os.stat(path)
    if stat.S_ISDIR(st.st_mode):
        kind = FileType.T_DIR
    elif stat.S_ISREG(st.st_mode):
        kind = FileType.T_FILE
    else:
        kind = FileType.T_DEVICE
    return kind, st.st_ino, st.st_size


def _line(path, info):
    kind, ino, size = info
    return f"{fmtname(path)} {int(kind)} {ino} {size}\n"


def ls(path, out):
    """Write a listing of ``path`` to ``out``; a directory lists its entries."""
    try:
        info = _describe(path)
    except OSError:
        print(f"ls: cannot open {path}", file=sys.stderr)
        return
    if info[0] is not FileType.T_DIR:
        out.write(_line(path, info))
        return
    if len(path) + 1 + DIRSIZ + 1 > BUFSIZE:
        out.write("ls: path too long\n")
        return
    try:
        names = sorted(os.listdir(path))
    except OSError:
        print(f"ls: cannot open {path}", file=sys.stderr)
        return
    for name in [".", "..", *names]:
        full = f"{path}/{name}"
        try:
            entry = _describe(full)
        except OSError:
            out.write(f"ls: cannot stat {full}\n")
            continue
        out.write(_line(full, entry))


def main(argv=None):
    """List each named path, or the current directory; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    for path in args or ["."]:
        ls(path, sys.stdout)
    return 0