"""
test_cli.py - Tests for the command-line entry point

Drives bookstore.__main__.main() with a fake stdin and checks stdout, stderr
and the exit status.
"""

import io

import pytest
from bookstore.__main__ import main


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    monkeypatch.delenv("BOOKSTORE_DATA_DIR", raising=False)
    monkeypatch.delenv("BOOKSTORE_VERBOSE", raising=False)


def _feed(monkeypatch, text):
    monkeypatch.setattr("sys.stdin", io.StringIO(text))


class TestMain:

    def test_session_output(self, tmp_path, monkeypatch, capsys):
        _feed(monkeypatch, "su root sjtu\nselect 000\nmodify -price=5\nimport 10 5.00\n\nbuy 000 3\nbuy 000 99\nquit\nshow\n")
        assert main(["--data-dir", str(tmp_path)]) == 0
        captured = capsys.readouterr()
        assert captured.out == "15.00\nInvalid\n"
        assert captured.err == ""

    def test_creates_data_files(self, tmp_path, monkeypatch):
        _feed(monkeypatch, "")
        data = tmp_path / "new"
        assert main(["--data-dir", str(data)]) == 0
        assert sorted(p.name for p in data.iterdir()) == ["accounts.db", "books.db", "finance.db", "ops.log"]

    def test_state_persists_between_runs(self, tmp_path, monkeypatch, capsys):
        _feed(monkeypatch, "su root sjtu\nselect X\nimport 1 1\n")
        assert main(["--data-dir", str(tmp_path)]) == 0
        _feed(monkeypatch, "su root sjtu\nshow\n")
        assert main(["--data-dir", str(tmp_path)]) == 0
        assert capsys.readouterr().out == "X\t\t\t\t0.00\t1\n"

    def test_data_dir_from_environment(self, tmp_path, monkeypatch):
        monkeypatch.setenv("BOOKSTORE_DATA_DIR", str(tmp_path))
        _feed(monkeypatch, "register envuser pw Env\n")
        assert main([]) == 0
        assert "envuser" in (tmp_path / "accounts.db").read_text(encoding="utf-8")

    def test_verbose_goes_to_stderr(self, tmp_path, monkeypatch, capsys):
        _feed(monkeypatch, "su root sjtu\nlogout\nlogout\n")
        assert main(["--data-dir", str(tmp_path), "--verbose"]) == 0
        captured = capsys.readouterr()
        assert captured.out == "Invalid\n"
        assert captured.err.count("✓ APPLIED") == 2
        assert captured.err.count("✗ REJECTED") == 1

    def test_invalid_utf8_input_is_rejected_not_fatal(self, tmp_path, monkeypatch, capsys):
        raw = b"su root sjtu\nsu \xff\xfe x\nshow finance\n"
        monkeypatch.setattr("sys.stdin", io.TextIOWrapper(io.BytesIO(raw), encoding="utf-8"))
        assert main(["--data-dir", str(tmp_path)]) == 0
        assert capsys.readouterr().out == "Invalid\n+ 0.00 - 0.00\n"
        assert b"root\tsu \xff\xfe x\n" in (tmp_path / "ops.log").read_bytes()

    def test_unwritable_audit_log_exits_1(self, tmp_path, monkeypatch, capsys):
        (tmp_path / "ops.log").mkdir()
        _feed(monkeypatch, "su root sjtu\n")
        assert main(["--data-dir", str(tmp_path)]) == 1
        assert "fatal" in capsys.readouterr().err

    def test_bad_data_dir_exits_2(self, tmp_path, monkeypatch, capsys):
        target = tmp_path / "file"
        target.write_text("not a directory")
        _feed(monkeypatch, "")
        assert main(["--data-dir", str(target)]) == 2
        assert "configuration error" in capsys.readouterr().err
