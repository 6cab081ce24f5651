import io

from xvkit.wc import Counts, main, wc


def test_basic_counts():
    text = "hello world\nfoo\n"
    assert wc(io.StringIO(text)) == Counts(2, 3, len(text))


def test_empty_input():
    assert wc(io.BytesIO(b"")) == Counts(0, 0, 0)


def test_word_across_chunk_boundary():
    data = b"a" * 600
    assert wc(io.BytesIO(data)) == Counts(0, 1, 600)


def test_nul_separates_words():
    assert wc(io.BytesIO(b"a\0b")).words == 2


def test_all_whitespace_kinds():
    data = "a b\tc\rd\ve\nf"
    counts = wc(io.StringIO(data))
    assert counts.words == 6
    assert counts.lines == 1


def test_binary_counts_bytes():
    data = "é\n".encode("utf-8")
    assert wc(io.BytesIO(data)).chars == len(data)


def test_main_file(tmp_path, capsys):
    f = tmp_path / "t.txt"
    data = b"one two\n"
    f.write_bytes(data)
    assert main([str(f)]) == 0
    assert capsys.readouterr().out == f"1 2 {len(data)} {f}\n"


def test_main_stdin(monkeypatch, capsys):
    monkeypatch.setattr("sys.stdin", io.StringIO("x y z"))
    assert main([]) == 0
    assert capsys.readouterr().out == "0 3 5 \n"


def test_main_cannot_open(tmp_path, capsys):
    missing = tmp_path / "nope"
    assert main([str(missing)]) == 1
    assert capsys.readouterr().out == f"wc: cannot open {missing}\n"