# tests/test_cli.py
import contextlib
import io
import json

import pytest

import linefix
from linefix.main import main


def _run_main(*args):
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf), contextlib.redirect_stderr(buf):
        exit_code = main(list(args))
    return exit_code, buf.getvalue()


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch):
    monkeypatch.delenv("LINEFIX_VERBOSE", raising=False)
    monkeypatch.delenv("NO_COLOR", raising=False)


@pytest.fixture()
def tree(tmp_path):
    root = tmp_path / "root"
    (root / ".git").mkdir(parents=True)
    (root / ".git" / "config").write_bytes(b"[core]")
    (root / "readme.txt").write_bytes(b"read me")
    (root / "done.txt").write_bytes(b"done\n")
    return root


def test_cli_help_smoke():
    exit_code, out = _run_main("-h")
    assert exit_code == 0
    assert "usage" in out.lower() or "help" in out.lower()


def test_cli_version_option():
    exit_code, out = _run_main("--version")
    assert exit_code == 0
    assert linefix.__version__ in out


def test_cli_version_command():
    exit_code, out = _run_main("version")
    assert exit_code == 0
    assert out.strip() == f"Version: {linefix.__version__}"


def test_cli_missing_arguments_prints_help():
    exit_code, out = _run_main()
    assert exit_code == 1
    assert "usage" in out.lower()


def test_cli_scan_reports_affected_files(tree):
    exit_code, out = _run_main("scan", str(tree), "--no-color")

    assert exit_code == 0
    assert f"1 files affected by newline issues in {tree}" in out
    assert str(tree / "readme.txt") in out
    assert "config" not in out
    assert (tree / "readme.txt").read_bytes() == b"read me"


def test_cli_scan_defaults_to_current_directory(tree, monkeypatch):
    monkeypatch.chdir(tree)

    exit_code, out = _run_main("scan", "--no-color")

    assert exit_code == 0
    assert "1 files affected by newline issues in . and subdirectories" in out
    assert "readme.txt" in out


def test_cli_fix_repairs_files(tree):
    exit_code, out = _run_main("fix", str(tree), "--no-color")

    assert exit_code == 0
    assert "Scanning for files with no newlines" in out
    assert f"1 files fixed newline issues in {tree}" in out
    assert (tree / "readme.txt").read_bytes() == b"read me\r"
    assert (tree / ".git" / "config").read_bytes() == b"[core]"

    exit_code, out = _run_main("scan", str(tree), "--no-color")
    assert "0 files affected" in out


def test_cli_colour_output(tree):
    _, out = _run_main("scan", str(tree))
    assert "\033[33m1\033[0m files affected" in out


def test_cli_no_color_env(tree, monkeypatch):
    monkeypatch.setenv("NO_COLOR", "1")
    _, out = _run_main("scan", str(tree))
    assert "\033[" not in out


def test_cli_missing_directory_fails(tmp_path):
    exit_code, out = _run_main("scan", str(tmp_path / "missing"), "--no-color")

    assert exit_code == 1
    assert "ERROR: Could not enumerate" in out


def test_cli_verbose_still_scans(tree):
    exit_code, out = _run_main("scan", str(tree), "--verbose", "--no-color")

    assert exit_code == 0
    assert "DEBUG: Found 2 files" in out
    assert "1 files affected by newline issues" in out


def test_cli_verbose_from_environment(tree, monkeypatch):
    monkeypatch.setenv("LINEFIX_VERBOSE", "true")

    exit_code, out = _run_main("fix", str(tree), "--no-color")

    assert exit_code == 0
    assert "DEBUG: fixed: " in out
    assert (tree / "readme.txt").read_bytes() == b"read me\r"


def test_cli_json_output(tree):
    buf = io.StringIO()
    with contextlib.redirect_stdout(buf):
        exit_code = main(["scan", str(tree), "--output", "json"])

    payload = json.loads(buf.getvalue())
    assert exit_code == 0
    assert payload["mode"] == "scan"
    assert payload["total"] == 2
    assert payload["affected"] == [str(tree / "readme.txt")]


def test_cli_exit_code_flag(tree):
    exit_code, _ = _run_main("scan", str(tree), "--exit-code")
    assert exit_code == 1

    _run_main("fix", str(tree))
    exit_code, _ = _run_main("scan", str(tree), "--exit-code")
    assert exit_code == 0


def test_cli_exit_code_flag_is_scan_only(tree):
    exit_code, out = _run_main("fix", str(tree), "--exit-code")
    assert exit_code == 2
    assert "unrecognized arguments" in out


def test_cli_writes_report(tree, tmp_path):
    report = tmp_path / "report.json"

    exit_code, out = _run_main("scan", str(tree), "--report", str(report))

    assert exit_code == 0
    assert f"Per-file report written to {report}" in out
    records = json.loads(report.read_text(encoding="utf-8"))
    statuses = {record["path"]: record["status"] for record in records}
    assert statuses == {
        str(tree / "done.txt"): "ok",
        str(tree / "readme.txt"): "missing",
    }


def test_cli_report_failure(tree, tmp_path):
    blocker = tmp_path / "blocker"
    blocker.write_text("", encoding="utf-8")

    exit_code, out = _run_main(
        "scan", str(tree), "--report", str(blocker / "r.csv"), "--no-color"
    )

    assert exit_code == 1
    assert "1 files affected" in out
    assert "ERROR: Could not write report" in out


def test_cli_schema_command():
    exit_code, out = _run_main("schema", "--format", "markdown")
    assert exit_code == 0
    assert "| status |" in out


def test_cli_completion_bash():
    exit_code, out = _run_main("completion")

    assert exit_code == 0
    assert "_shtab_linefix" in out
    for command in ("scan", "fix", "schema", "version", "completion"):
        assert command in out


def test_cli_completion_zsh():
    exit_code, out = _run_main("completion", "--shell", "zsh")

    assert exit_code == 0
    assert "#compdef linefix" in out


def test_cli_completion_rejects_unknown_shell():
    exit_code, out = _run_main("completion", "--shell", "fish")

    assert exit_code == 2
    assert "invalid choice" in out
