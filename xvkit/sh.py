"""Parser for the shell's command language.

Commands are words with ``<``, ``>`` and ``>>`` redirections, joined by
``|`` pipes, ``;`` sequences, ``&`` background markers and ``( )`` blocks.
"""

from dataclasses import dataclass, field

WHITESPACE = " \t\r\n\v"
SYMBOLS = "<|>&;()"
MAXARGS = 10


class ShellSyntaxError(ValueError):
    """The command line could not be parsed."""


@dataclass
class ExecCmd:
    """Run a program with its arguments."""

    argv: list = field(default_factory=list)


@dataclass
class RedirCmd:
    """Run ``cmd`` with descriptor ``fd`` opened on ``file``.

    ``mode`` is "r" for reading, "w" for truncating write, "a" for append.
    """

    cmd: object
    file: str
    mode: str
    fd: int


@dataclass
class PipeCmd:
    """Connect the output of ``left`` to the input of ``right``."""

    left: object
    right: object


@dataclass
class ListCmd:
    """Run ``left`` to completion, then ``right``."""

    left: object
    right: object


@dataclass
class BackCmd:
    """Run ``cmd`` without waiting for it."""

    cmd: object


def _skip_ws(s, pos):
    while pos < len(s) and s[pos] in WHITESPACE:
        pos += 1
    return pos


def gettoken(s, pos=0):
    """Scan one token of ``s`` starting at ``pos``.

    Returns ``(kind, start, end, next_pos)``: ``kind`` is "" at the end of
    input, "a" for a word, "+" for ``>>``, or the symbol itself; the token
    text is ``s[start:end]`` and ``next_pos`` is past any trailing blanks.
    """
    pos = _skip_ws(s, pos)
    start = pos
    if pos >= len(s):
        kind = ""
    elif s[pos] in "|();&<":
        kind = s[pos]
        pos += 1
    elif s[pos] == ">":
        kind = ">"
        pos += 1
        if pos < len(s) and s[pos] == ">":
            kind = "+"
            pos += 1
    else:
        kind = "a"
        while pos < len(s) and s[pos] not in WHITESPACE and s[pos] not in SYMBOLS:
            pos += 1
    return kind, start, pos, _skip_ws(s, pos)


class _Parser:
    def __init__(self, s):
        self.s = s
        self.pos = 0

    def peek(self, toks):
        self.pos = _skip_ws(self.s, self.pos)
        return self.pos < len(self.s) and self.s[self.pos] in toks

    def take(self):
        kind, start, end, self.pos = gettoken(self.s, self.pos)
        return kind, self.s[start:end]

    def line(self):
        cmd = self.pipe()
        while self.peek("&"):
            self.take()
            cmd = BackCmd(cmd)
        if self.peek(";"):
            self.take()
            cmd = ListCmd(cmd, self.line())
        return cmd

    def pipe(self):
        cmd = self.exec()
        if self.peek("|"):
            self.take()
            cmd = PipeCmd(cmd, self.pipe())
        return cmd

    def redirs(self, cmd):
        while self.peek("<>"):
            tok, _ = self.take()
            kind, word = self.take()
            if kind != "a":
                raise ShellSyntaxError("missing file for redirection")
            if tok == "<":
                cmd = RedirCmd(cmd, word, "r", 0)
            elif tok == ">":
                cmd = RedirCmd(cmd, word, "w", 1)
            else:
                cmd = RedirCmd(cmd, word, "a", 1)
        return cmd

    def block(self):
        if not self.peek("("):
            raise ShellSyntaxError("parseblock")
        self.take()
        cmd = self.line()
        if not self.peek(")"):
            raise ShellSyntaxError("syntax - missing )")
        self.take()
        return self.redirs(cmd)

    def exec(self):
        if self.peek("("):
            return self.block()
        ecmd = ExecCmd()
        ret = self.redirs(ecmd)
        while not self.peek("|)&;"):
            kind, word = self.take()
            if kind == "":
                break
            if kind != "a":
                raise ShellSyntaxError("syntax")
            ecmd.argv.append(word)
            if len(ecmd.argv) >= MAXARGS:
                raise ShellSyntaxError("too many args")
            ret = self.redirs(ret)
        return ret


def parse_cmd(s):
    """Parse a whole command line into a command tree."""
    s = s.split("\0", 1)[0]
    parser = _Parser(s)
    cmd = parser.line()
    parser.peek("")
    if parser.pos != len(s):
        raise ShellSyntaxError(f"leftovers: {s[parser.pos:]}")
    return cmd