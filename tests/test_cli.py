import io
from contextlib import contextmanager

import pytest

from tabclip import cli
from tabclip.errors import ClipboardError


@pytest.fixture
def csv_file(tmp_path):
    path = tmp_path / "t.csv"
    path.write_text("a,b\n1,2\n")
    return str(path)


def test_stdout_output(csv_file, capsysbinary):
    assert cli.main(["-o", csv_file]) == 0
    assert capsysbinary.readouterr().out == (
        b"<table><tr><td>a</td><td>b</td></tr><tr><td>1</td><td>2</td></tr></table>"
    )

def test_join_flag(csv_file, capsysbinary):
    assert cli.main(["-o", "-j", csv_file, csv_file]) == 0
    out = capsysbinary.readouterr().out
    assert out.count(b"<table>") == 1
    assert out.count(b"<tr>") == 4

def test_default_writes_to_clipboard(csv_file, monkeypatch):
    captured = io.BytesIO()

    @contextmanager
    def fake_sink():
        yield captured

    monkeypatch.setattr(cli, "clipboard_sink", fake_sink)
    assert cli.main([csv_file]) == 0
    assert captured.getvalue().startswith(b"<table><tr><td>a</td>")

def test_clipboard_failure_is_reported(csv_file, monkeypatch, capsys):
    @contextmanager
    def broken_sink():
        raise ClipboardError("cannot start xclip: not found")
        yield

    monkeypatch.setattr(cli, "clipboard_sink", broken_sink)
    assert cli.main([csv_file]) == 1
    assert "tabclip: cannot start xclip" in capsys.readouterr().err

def test_unknown_format_exit_code(csv_file, capsys):
    assert cli.main(["-o", "-f", "xml", csv_file]) == 2
    captured = capsys.readouterr()
    assert "tabclip: unsupported format: xml" in captured.err
    assert captured.out == ""

def test_missing_file_exit_code(tmp_path, capsys):
    assert cli.main(["-o", str(tmp_path / "nope.csv")]) == 1
    assert "nope.csv" in capsys.readouterr().err

def test_prefer_breaks_sniff_tie(tmp_path, capsysbinary):
    path = tmp_path / "notes"
    path.write_text("hello world\n")
    assert cli.main(["-o", str(path)]) == 1
    capsysbinary.readouterr()
    assert cli.main(["-o", "--prefer", "csv", str(path)]) == 0
    assert capsysbinary.readouterr().out == b"<table><tr><td>hello world</td></tr></table>"

def test_version(capsys):
    with pytest.raises(SystemExit) as info:
        cli.main(["-v"])
    assert info.value.code == 0
    assert capsys.readouterr().out.strip() == "1.0.1"
