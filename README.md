# xvkit

Pure-Python tools and kernel algorithms for a small RISC-V teaching
operating system: Sv39 page tables over a simulated physical memory, a
file-system image builder, a parser for the shell's command language, a
free-list memory allocator, a minimal `printf`, and a set of classic
command-line utilities that work on the host's files.

It has no dependencies beyond the standard library.

## Installing

```
pip install .
```

To run the test suite:

```
pip install ".[test]"
pytest
```

## Command-line tools

| Command      | What it does                                                        |
|--------------|---------------------------------------------------------------------|
| `xv-mkfs`    | Build a file-system image: `xv-mkfs fs.img README user/_cat`        |
| `xv-grep`    | Print lines matching a pattern (`^ . * $` only)                     |
| `xv-wc`      | Print lines, words and bytes of each file, or of standard input     |
| `xv-search`  | `xv-search <filename> <keyword>`: prints `Found: ...` or `Not found.` |
| `xv-cat`     | Concatenate files (or standard input) to standard output            |
| `xv-echo`    | Print the arguments separated by spaces                             |
| `xv-ls`      | Describe a file, or list a directory's `.`, `..` and sorted entries |
| `xv-mkdir`   | Create directories, stopping at the first failure                   |
| `xv-rm`      | Remove files or empty directories, stopping at the first failure    |
| `xv-ln`      | Make a hard link: `xv-ln old new`                                   |
| `xv-touch`   | Create a file if it does not exist                                  |
| `xv-kill`    | Kill processes by id                                                |

`xv-ls` prints each entry as its name padded to 14 characters, then its
type (1 directory, 2 regular file, 3 anything else), inode number and size.

`xv-mkfs` writes a 2000-block image with 1024-byte blocks, laid out as boot
block, superblock, log, inode blocks, free bitmap and data blocks, with
every named file in the root directory. Arguments starting with `user/`
lose that prefix, and a single leading `_` is dropped from each file name,
so `user/_cat` becomes `/cat` in the image. Names must fit in 14 bytes.

## Library use

Page tables live in a simulated physical memory (`xvkit.vm`):

```python
from xvkit.vm import PhysicalMemory, PageTable
from xvkit.riscv import PTE_W, pgroundup

mem = PhysicalMemory()
pt = PageTable.create(mem)
size = pt.grow(0, pgroundup(100), PTE_W)
pt.copyout(0, b"hello\0")
assert pt.copyinstr(0, 16) == b"hello"
pt.destroy(size)
```

`PageTable` also offers `walk`, `walkaddr`, `mappages`, `unmap`,
`load_first`, `shrink`, `copy_to`, `clear_user` and `copyin`. Failures the
kernel would treat as fatal raise `Panic`; running out of pages raises
`OutOfMemory`; unmapped or unwritable user addresses raise `BadAddress`.
`xvkit.riscv` holds the page arithmetic (`pgroundup`, `pgrounddown`, `px`,
`pa2pte`, `pte2pa`, `pte_flags`, `make_satp`) and the system parameters.

Building an image in memory (`xvkit.mkfs`):

```python
from xvkit.mkfs import FsImage

image = FsImage()
image.add_file("README", b"hello\n")
image.finish()
data = image.to_bytes()
```

`Superblock` and `DiskInode` pack and unpack the on-disk records, and
`build_image(paths)` builds a finished image from host files.

Parsing a shell command line (`xvkit.sh`) into a tree of `ExecCmd`,
`RedirCmd`, `PipeCmd`, `ListCmd` and `BackCmd` nodes:

```python
from xvkit.sh import parse_cmd

tree = parse_cmd("cat < in | grep x > out; echo done &")
```

Malformed input raises `ShellSyntaxError`.

Other helpers:

* `xvkit.printf.sprintf`, `fprintf` and `printf` understand `%d %u %x %p %s %%`
  (with `l`/`ll` prefixes); integer conversions print the low 32 bits of
  their argument and hex digits are upper case.
* `xvkit.umalloc.Allocator` is a first-fit free-list allocator (`malloc`,
  `free`) over a simulated heap grown with `sbrk`.
* `xvkit.grep.match` is the small regular-expression matcher.
* `xvkit.prng.ParkMiller` and `do_rand` are the minimal-standard random
  number generator.
* `xvkit.ulib.atoi`, `strcmp` and `gets` behave like their C library
  counterparts.

## What it does not do

There is no kernel to boot and nothing that runs user programs: the shell
module parses command lines but does not execute them and has no command
of its own, the page tables and allocator work on simulated memory only,
and no stress or system-call test runner is included. `xv-mkfs` writes an
image but nothing here mounts or reads one back as a file system.