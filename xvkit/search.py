"""Report whether a keyword occurs in a file."""

import sys

CHUNK = 511


def find(text, word):
    """Index of the first occurrence of ``word`` in ``text``, or -1."""
    return text.find(word)


def search(stream, keyword):
    """Return True if ``keyword`` occurs within one of the stream's chunks.

    The stream is examined in independent chunks of 511 characters, each
    ending at its first NUL; a match spanning two chunks is not found.
    """
    while True:
        chunk = stream.read(CHUNK)
        if not chunk:
            return False
        if isinstance(chunk, (bytes, bytearray)):
            chunk = bytes(chunk)
            word = keyword.encode("utf-8") if isinstance(keyword, str) else keyword
            text = chunk.split(b"\0", 1)[0]
        else:
            word = keyword
            text = chunk.split("\0", 1)[0]
        if find(text, word) >= 0:
            return True


def main(argv=None):
    """Search ``<filename> <keyword>``; return the exit status."""
    args = sys.argv[1:] if argv is None else list(argv)
    if len(args) != 2:
        print("Write: search <filename> <keyword>", file=sys.stderr)
        return 1
    filename, keyword = args
    try:
        f = open(filename, "rb")
    except OSError:
        print(f"search: cannot open {filename}", file=sys.stderr)
        return 1
    with f:
        found = search(f, keyword)
    print(f"Found: {keyword}" if found else "Not found.")
    return 0