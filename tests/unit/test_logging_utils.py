"""Structured JSONL execution log."""

from __future__ import annotations

import json
from pathlib import Path

import pytest

from mcerv.utils import logging_utils


@pytest.fixture
def exec_log(monkeypatch: pytest.MonkeyPatch, tmp_path: Path) -> Path:
    monkeypatch.setattr(logging_utils, "EXEC_LOG_ENABLED", True)
    monkeypatch.setattr(logging_utils, "EXEC_LOG_DIR", tmp_path / "logs")
    monkeypatch.setattr(logging_utils, "EXEC_LOG_MAX_CHARS", 40)
    monkeypatch.setattr(logging_utils, "_EXEC_LOG_FILE", None)
    monkeypatch.setattr(logging_utils, "_EXEC_LOG_FAILED", False)
    return tmp_path / "logs"


def test_log_event_writes_one_json_line_per_event(exec_log: Path) -> None:
    logging_utils.log_event("command_dispatched", command="list servers", path=Path("/tmp/x"))
    logging_utils.log_event("mod_delete_failed", error=PermissionError("file is locked"))

    path = Path(logging_utils.get_exec_log_path())
    assert path.parent == exec_log.resolve()
    assert path.name.startswith("mcerv-") and path.suffix == ".jsonl"
    records = [json.loads(line) for line in path.read_text(encoding="utf-8").splitlines()]
    assert [r["event"] for r in records] == ["command_dispatched", "mod_delete_failed"]
    assert records[0]["path"] == "/tmp/x"
    assert records[1]["error"] == "PermissionError: file is locked"
    assert records[0]["thread"]


def test_long_values_are_truncated(exec_log: Path) -> None:
    logging_utils.log_event("http_retry", url="x" * 500)
    record = json.loads(Path(logging_utils.get_exec_log_path()).read_text(encoding="utf-8"))
    assert len(record["url"]) <= 40
    assert "truncated:500" in record["url"]


def test_disabled_log_writes_nothing(monkeypatch: pytest.MonkeyPatch) -> None:
    monkeypatch.setattr(logging_utils, "EXEC_LOG_ENABLED", False)
    logging_utils.log_event("ignored")
    assert logging_utils.get_exec_log_path() is None


def test_unwritable_log_dir_warns_once_then_disables(
    exec_log: Path, capsys: pytest.CaptureFixture[str]
) -> None:
    exec_log.write_text("not a directory", encoding="utf-8")

    logging_utils.log_event("session_started")
    logging_utils.log_event("session_closed")

    warnings = [line for line in capsys.readouterr().out.splitlines() if line.startswith("[warn]")]
    assert len(warnings) == 1
    assert logging_utils.get_exec_log_path() is None
