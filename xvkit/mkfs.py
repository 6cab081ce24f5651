"""Build a file-system image holding a root directory of files.

Layout: [ boot block | superblock | log | inode blocks | free bitmap | data ].
"""

import os
import struct
import sys
from dataclasses import dataclass, field
from pathlib import Path

from xvkit.ls import DIRSIZ, FileType
from xvkit.riscv import FSSIZE, LOGSIZE

BSIZE = 1024
FSMAGIC = 0x10203040
ROOTINO = 1
NDIRECT = 12
NINDIRECT = BSIZE // 4
MAXFILE = NDIRECT + NINDIRECT
NINODES = 200

_SUPERBLOCK = struct.Struct("<8I")
_DINODE = struct.Struct(f"<4hI{NDIRECT + 1}I")
_DIRENT = struct.Struct(f"<H{DIRSIZ}s")
_INDIRECT = struct.Struct(f"<{NINDIRECT}I")

IPB = BSIZE // _DINODE.size  # inodes per block
BPB = BSIZE * 8  # bitmap bits per block


class MkfsError(Exception):
    """The image could not be built."""


@dataclass
class Superblock:
    """Describes the disk layout."""

    magic: int
    size: int
    nblocks: int
    ninodes: int
    nlog: int
    logstart: int
    inodestart: int
    bmapstart: int

    def pack(self):
        """Encode as little-endian bytes."""
        return _SUPERBLOCK.pack(
            self.magic, self.size, self.nblocks, self.ninodes,
            self.nlog, self.logstart, self.inodestart, self.bmapstart,
        )

    @classmethod
    def unpack(cls, data):
        """Decode from the start of ``data``."""
        return cls(*_SUPERBLOCK.unpack_from(data))


@dataclass
class DiskInode:
    """An on-disk inode."""

    type: int = 0
    major: int = 0
    minor: int = 0
    nlink: int = 0
    size: int = 0
    addrs: list = field(default_factory=lambda: [0] * (NDIRECT + 1))

    def pack(self):
        """Encode as little-endian bytes."""
        if len(self.addrs) != NDIRECT + 1:
            raise ValueError(f"an inode holds {NDIRECT + 1} block addresses")
        return _DINODE.pack(
            self.type, self.major, self.minor, self.nlink, self.size, *self.addrs
        )

    @classmethod
    def unpack(cls, data):
        """Decode from the start of ``data``."""
        values = _DINODE.unpack_from(data)
        return cls(*values[:5], list(values[5:]))


class FsImage:
    """An in-memory image with its root directory already created."""

    def __init__(self, size=FSSIZE, ninodes=NINODES, nlog=LOGSIZE):
        self.size = size
        self.ninodes = ninodes
        self.nlog = nlog
        self.nbitmap = size // BPB + 1
        self.ninodeblocks = ninodes // IPB + 1
        self.nmeta = 2 + nlog + self.ninodeblocks + self.nbitmap
        self.nblocks = size - self.nmeta
        if self.nblocks <= 0:
            raise MkfsError("image too small for its metadata")
        self.sb = Superblock(
            magic=FSMAGIC,
            size=size,
            nblocks=self.nblocks,
            ninodes=ninodes,
            nlog=nlog,
            logstart=2,
            inodestart=2 + nlog,
            bmapstart=2 + nlog + self.ninodeblocks,
        )
        self._data = bytearray(size * BSIZE)
        self.freeinode = 1
        self.freeblock = self.nmeta
        self.used = None
        self.write_block(1, self.sb.pack())
        root = self.ialloc(FileType.T_DIR)
        if root != ROOTINO:
            raise MkfsError("root inode misplaced")
        self._link(ROOTINO, ".")
        self._link(ROOTINO, "..")

    def read_block(self, bn):
        """Return block ``bn``."""
        self._check_block(bn)
        return bytes(self._data[bn * BSIZE:(bn + 1) * BSIZE])

    def write_block(self, bn, data):
        """Store ``data``, zero-padded to a whole block, as block ``bn``."""
        self._check_block(bn)
        if len(data) > BSIZE:
            raise ValueError("data larger than a block")
        self._data[bn * BSIZE:(bn + 1) * BSIZE] = bytes(data).ljust(BSIZE, b"\0")

    def _check_block(self, bn):
        if not 0 <= bn < self.size:
            raise MkfsError(f"block {bn} outside the image")

    def _inode_location(self, inum):
        if not 0 <= inum < self.ninodes:
            raise MkfsError(f"inode {inum} outside the inode table")
        return inum // IPB + self.sb.inodestart, (inum % IPB) * _DINODE.size

    def read_inode(self, inum):
        """Return inode ``inum``."""
        bn, off = self._inode_location(inum)
        return DiskInode.unpack(self.read_block(bn)[off:off + _DINODE.size])

    def write_inode(self, inum, din):
        """Store ``din`` as inode ``inum``."""
        bn, off = self._inode_location(inum)
        block = bytearray(self.read_block(bn))
        block[off:off + _DINODE.size] = din.pack()
        self.write_block(bn, block)

    def ialloc(self, itype):
        """Allocate the next inode with the given type and one link."""
        inum = self.freeinode
        self.freeinode += 1
        self.write_inode(inum, DiskInode(type=int(itype), nlink=1, size=0))
        return inum

    def _next_block(self):
        if self.freeblock >= self.size:
            raise MkfsError("out of data blocks")
        bn = self.freeblock
        self.freeblock += 1
        return bn

    def iappend(self, inum, data):
        """Append ``data`` to the end of inode ``inum``."""
        din = self.read_inode(inum)
        off = din.size
        view = memoryview(bytes(data))
        while view:
            fbn = off // BSIZE
            if fbn >= MAXFILE:
                raise MkfsError(f"inode {inum}: file too large")
            if fbn < NDIRECT:
                if din.addrs[fbn] == 0:
                    din.addrs[fbn] = self._next_block()
                x = din.addrs[fbn]
            else:
                if din.addrs[NDIRECT] == 0:
                    din.addrs[NDIRECT] = self._next_block()
                indirect = list(_INDIRECT.unpack(self.read_block(din.addrs[NDIRECT])))
                if indirect[fbn - NDIRECT] == 0:
                    indirect[fbn - NDIRECT] = self._next_block()
                    self.write_block(din.addrs[NDIRECT], _INDIRECT.pack(*indirect))
                x = indirect[fbn - NDIRECT]
            n1 = min(len(view), (fbn + 1) * BSIZE - off)
            start = off - fbn * BSIZE
            block = bytearray(self.read_block(x))
            block[start:start + n1] = view[:n1]
            self.write_block(x, block)
            view = view[n1:]
            off += n1
        din.size = off
        self.write_inode(inum, din)

    def _link(self, inum, name):
        encoded = name.encode("utf-8")
        if len(encoded) > DIRSIZ:
            raise MkfsError(f"{name}: name longer than {DIRSIZ} bytes")
        self.iappend(ROOTINO, _DIRENT.pack(inum, encoded))

    def add_file(self, name, data):
        """Add a regular file to the root directory and return its inode.

        A single leading underscore is dropped from ``name``.
        """
        if self.used is not None:
            raise MkfsError("image already finished")
        if "/" in name:
            raise MkfsError(f"{name}: name contains '/'")
        if name.startswith("_"):
            name = name[1:]
        if len(name.encode("utf-8")) > DIRSIZ:
            raise MkfsError(f"{name}: name longer than {DIRSIZ} bytes")
        inum = self.ialloc(FileType.T_FILE)
        self._link(inum, name)
        self.iappend(inum, data)
        return inum

    def finish(self):
        """Round up the root directory size and write the free bitmap.

        Returns the number of blocks marked in use.
        """
        if self.used is not None:
            raise MkfsError("image already finished")
        din = self.read_inode(ROOTINO)
        din.size = (din.size // BSIZE + 1) * BSIZE
        self.write_inode(ROOTINO, din)
        used = self.freeblock
        if used >= BPB:
            raise MkfsError("too many blocks for one bitmap block")
        bitmap = bytearray(b"\xff" * (used // 8))
        if used % 8:
            bitmap.append((1 << (used % 8)) - 1)
        self.write_block(self.sb.bmapstart, bitmap)
        self.used = used
        return used

    def to_bytes(self):
        """Return the whole image."""
        return bytes(self._data)


def build_image(paths):
    """Build a finished image holding the given host files in its root."""
    img = FsImage()
    for path in paths:
        path = os.fspath(path)
        short = path[len("user/"):] if path.startswith("user/") else path
        if "/" in short:
            raise MkfsError(f"{path}: name contains '/'")
        try:
            data = Path(path).read_bytes()
        except OSError as exc:
            raise MkfsError(f"{path}: {exc.strerror}") from exc
        img.add_file(short, data)
    img.finish()
    return img


def main(argv=None):
    """Write an image named by the first argument; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if not args:
        print("Usage: mkfs fs.img files...", file=sys.stderr)
        return 1
    out, files = args[0], args[1:]
    try:
        img = build_image(files)
    except MkfsError as exc:
        print(exc, file=sys.stderr)
        return 1
    print(
        f"nmeta {img.nmeta} (boot, super, log blocks {img.nlog} inode blocks "
        f"{img.ninodeblocks}, bitmap blocks {img.nbitmap}) blocks {img.nblocks} "
        f"total {img.size}"
    )
    print(f"balloc: first {img.used} blocks have been allocated")
    print(f"balloc: write bitmap block at sector {img.sb.bmapstart}")
    try:
        Path(out).write_bytes(img.to_bytes())
    except OSError as exc:
        print(f"{out}: {exc.strerror}", file=sys.stderr)
        return 1
    return 0