import struct

import pytest

from xvkit.ls import DIRSIZ, FileType
from xvkit.mkfs import (
    BSIZE,
    FSMAGIC,
    IPB,
    MAXFILE,
    NDIRECT,
    NINDIRECT,
    ROOTINO,
    DiskInode,
    FsImage,
    MkfsError,
    Superblock,
    build_image,
    main,
)
from xvkit.riscv import FSSIZE, LOGSIZE


def read_contents(img, inum):
    din = img.read_inode(inum)
    blocks = list(din.addrs[:NDIRECT])
    if din.addrs[NDIRECT]:
        blocks += struct.unpack(f"<{NINDIRECT}I", img.read_block(din.addrs[NDIRECT]))
    data = b"".join(img.read_block(b) for b in blocks if b)
    return data[:din.size]


def dir_entries(img):
    raw = read_contents(img, ROOTINO)
    return [
        (inum, name.rstrip(b"\0").decode())
        for inum, name in struct.iter_unpack(f"<H{DIRSIZ}s", raw)
        if inum
    ]


def test_superblock_round_trip():
    sb = Superblock(FSMAGIC, 100, 50, 200, 30, 2, 32, 45)
    packed = sb.pack()
    assert Superblock.unpack(packed) == sb
    assert packed[:4] == FSMAGIC.to_bytes(4, "little")


def test_dinode_round_trip():
    din = DiskInode(type=2, major=0, minor=0, nlink=1, size=77,
                    addrs=list(range(1, NDIRECT + 2)))
    packed = din.pack()
    assert DiskInode.unpack(packed) == din
    assert len(packed) * IPB == BSIZE


def test_dinode_rejects_wrong_address_count():
    with pytest.raises(ValueError):
        DiskInode(addrs=[0]).pack()


def test_default_layout():
    img = FsImage()
    sb = Superblock.unpack(img.read_block(1))
    assert sb == img.sb
    assert sb.magic == FSMAGIC
    assert sb.size == FSSIZE
    assert sb.logstart == 2
    assert sb.inodestart == 2 + LOGSIZE
    assert img.nmeta == 46
    assert sb.bmapstart == 45
    assert sb.nblocks + img.nmeta == FSSIZE


def test_root_directory():
    img = FsImage()
    din = img.read_inode(ROOTINO)
    assert din.type == FileType.T_DIR
    assert din.nlink == 1
    assert dir_entries(img) == [(ROOTINO, "."), (ROOTINO, "..")]


def test_add_file_round_trip():
    img = FsImage()
    inum = img.add_file("_cat", b"hello")
    assert dir_entries(img)[-1] == (inum, "cat")
    assert read_contents(img, inum) == b"hello"
    assert img.read_inode(inum).type == FileType.T_FILE


def test_large_file_uses_indirect_block():
    img = FsImage()
    data = bytes(i % 251 for i in range((NDIRECT + 3) * BSIZE + 17))
    inum = img.add_file("big", data)
    assert img.read_inode(inum).addrs[NDIRECT] != 0
    assert read_contents(img, inum) == data


def test_append_continues_mid_block():
    img = FsImage()
    inum = img.add_file("f", b"a" * (BSIZE - 3))
    img.iappend(inum, b"bcdefg")
    assert read_contents(img, inum) == b"a" * (BSIZE - 3) + b"bcdefg"


def test_file_too_large():
    img = FsImage()
    with pytest.raises(MkfsError):
        img.add_file("huge", bytes((MAXFILE + 1) * BSIZE))


def test_name_limits():
    img = FsImage()
    inum = img.add_file("n" * DIRSIZ, b"")
    assert dir_entries(img)[-1] == (inum, "n" * DIRSIZ)
    with pytest.raises(MkfsError):
        img.add_file("n" * (DIRSIZ + 1), b"")
    with pytest.raises(MkfsError):
        img.add_file("a/b", b"")


def test_finish_marks_bitmap_and_rounds_root():
    img = FsImage()
    img.add_file("x", b"data")
    used = img.finish()
    assert used == img.freeblock
    root = img.read_inode(ROOTINO)
    assert root.size > 0 and root.size % BSIZE == 0
    bitmap = img.read_block(img.sb.bmapstart)
    assert int.from_bytes(bitmap, "little") == (1 << used) - 1
    with pytest.raises(MkfsError):
        img.finish()
    with pytest.raises(MkfsError):
        img.add_file("late", b"")


def test_to_bytes_holds_every_block():
    img = FsImage()
    raw = img.to_bytes()
    assert len(raw) == FSSIZE * BSIZE
    assert raw[BSIZE:2 * BSIZE] == img.read_block(1)


def test_block_range_checked():
    img = FsImage()
    with pytest.raises(MkfsError):
        img.read_block(FSSIZE)


def test_build_image(tmp_path, monkeypatch):
    (tmp_path / "user").mkdir()
    (tmp_path / "user" / "_echo").write_bytes(b"echo-bin")
    (tmp_path / "README").write_bytes(b"readme")
    monkeypatch.chdir(tmp_path)
    img = build_image(["README", "user/_echo"])
    entries = dir_entries(img)
    assert [name for _, name in entries] == [".", "..", "README", "echo"]
    assert read_contents(img, entries[3][0]) == b"echo-bin"


def test_build_image_errors(tmp_path, monkeypatch):
    monkeypatch.chdir(tmp_path)
    with pytest.raises(MkfsError):
        build_image(["nope"])
    with pytest.raises(MkfsError):
        build_image(["a/b"])


def test_main_writes_image(tmp_path, monkeypatch, capsys):
    (tmp_path / "README").write_bytes(b"hi")
    monkeypatch.chdir(tmp_path)
    assert main(["fs.img", "README"]) == 0
    assert (tmp_path / "fs.img").stat().st_size == FSSIZE * BSIZE
    assert "balloc: first" in capsys.readouterr().out


def test_main_usage(capsys):
    assert main([]) == 1
    assert "Usage: mkfs" in capsys.readouterr().err