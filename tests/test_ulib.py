import io

import pytest

from xvkit.ulib import atoi, gets, strcmp


@pytest.mark.parametrize(
    "text, expected",
    [("123", 123), ("123abc", 123), ("abc", 0), (" 12", 0), ("-5", 0), ("", 0)],
)
def test_atoi(text, expected):
    assert atoi(text) == expected


def test_strcmp_equal():
    assert strcmp("abc", "abc") == 0
    assert strcmp(b"", b"") == 0


def test_strcmp_order():
    assert strcmp("a", "b") < 0
    assert strcmp("b", "a") > 0
    assert strcmp("abc", "ab") == ord("c")
    assert strcmp("ab", "abc") == -ord("c")


def test_strcmp_unsigned_bytes():
    assert strcmp(b"\xff", b"a") > 0


def test_strcmp_stops_at_nul():
    assert strcmp("a\0b", "a\0c") == 0


def test_gets_reads_lines():
    stream = io.StringIO("hello\nworld")
    assert gets(stream, 100) == "hello\n"
    assert gets(stream, 100) == "world"
    assert gets(stream, 100) == ""


def test_gets_limit():
    stream = io.StringIO("abcdef")
    assert gets(stream, 4) == "abc"
    assert gets(stream, 1) == ""
    assert gets(stream, 10) == "def"


def test_gets_carriage_return_ends_line():
    assert gets(io.StringIO("ab\rcd"), 10) == "ab\r"


def test_gets_binary_stream():
    assert gets(io.BytesIO(b"xy\nz"), 10) == b"xy\n"