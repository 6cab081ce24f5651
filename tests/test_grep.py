import io

import pytest

from xvkit.grep import grep, main, match


@pytest.mark.parametrize(
    "re, text, expected",
    [
        ("^ab", "abc", True),
        ("^ab", "cab", False),
        ("b$", "ab", True),
        ("b$", "ba", False),
        ("a.c", "xabcx", True),
        ("a*b", "b", True),
        ("x*", "", True),
        ("", "anything", True),
        ("^$", "", True),
        ("^$", "x", False),
        ("^a.*z$", "abcz", True),
        ("^a.*z$", "abczy", False),
        ("abc", "ab", False),
    ],
)
def test_match(re, text, expected):
    assert match(re, text) is expected


def test_match_long_text_without_stars():
    text = "a" * 3000 + "b"
    assert match("a" * 1500 + "b", text)


def test_grep_prints_matching_complete_lines():
    out = io.StringIO()
    grep("foo", io.StringIO("foo\nbar\nfood\nfoo tail"), out)
    assert out.getvalue() == "foo\nfood\n"


def test_grep_output_lines_all_match():
    data = "".join(f"line{i}\n" for i in range(300))
    out = io.StringIO()
    grep("^line1", io.StringIO(data), out)
    lines = out.getvalue().splitlines()
    assert lines
    assert all(line.startswith("line1") for line in lines)


def test_grep_stops_on_overlong_line():
    out = io.StringIO()
    grep("foo", io.StringIO("a" * 2000 + "\nfoo\n"), out)
    assert out.getvalue() == ""


def test_main_usage(capsys):
    assert main([]) == 1
    assert "usage: grep pattern [file ...]" in capsys.readouterr().err


def test_main_files(tmp_path, capsys):
    f = tmp_path / "in.txt"
    f.write_text("alpha\nbeta\ngamma\n")
    assert main(["a$", str(f)]) == 0
    assert capsys.readouterr().out == "alpha\nbeta\ngamma\n"


def test_main_cannot_open(tmp_path, capsys):
    missing = tmp_path / "nope"
    assert main(["x", str(missing)]) == 1
    assert capsys.readouterr().out == f"grep: cannot open {missing}\n"


def test_main_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("one\ntwo\n"))
    assert main(["^t"]) == 0
    assert capsys.readouterr().out == "two\n"