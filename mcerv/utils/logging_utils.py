"""Opt-in JSONL trace of shell activity.

With ``EXEC_LOG_ENABLED`` set, every ``log_event`` call appends one line to
``EXEC_LOG_DIR/mcerv-<session>-pid<pid>.jsonl``: sessions starting and closing,
command failures, HTTP retries, server attach/detach and shutdown timeouts.
A log that cannot be opened or written is disabled for the rest of the
session after a single warning.
"""

import json
import os
import threading
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

from mcerv.config import EXEC_LOG_ENABLED, EXEC_LOG_DIR, EXEC_LOG_MAX_CHARS

# ---------------------------------------------------------------------------
# Session state
# ---------------------------------------------------------------------------
_EXEC_LOG_SESSION_ID: str = datetime.now(timezone.utc).strftime("%Y%m%dT%H%M%SZ")
_EXEC_LOG_FILE: Path | None = None
_EXEC_LOG_FAILED: bool = False
_EXEC_LOG_LOCK: threading.Lock = threading.Lock()


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------

def _truncate_for_log(value: str) -> str:
    if EXEC_LOG_MAX_CHARS <= 0 or len(value) <= EXEC_LOG_MAX_CHARS:
        return value
    marker = f"...[truncated:{len(value)}]"
    keep = max(0, EXEC_LOG_MAX_CHARS - len(marker))
    return value[:keep] + marker


def _prepare_for_log(value: Any) -> Any:
    """Make *value* JSON-safe, clipping long text to ``EXEC_LOG_MAX_CHARS``."""
    if value is None or isinstance(value, (bool, int, float)):
        return value
    if isinstance(value, str):
        return _truncate_for_log(value)
    if isinstance(value, bytes):
        return _truncate_for_log(value.decode("utf-8", errors="replace"))
    if isinstance(value, Path):
        return str(value)
    if isinstance(value, BaseException):
        return _truncate_for_log(f"{type(value).__name__}: {value}")
    if isinstance(value, dict):
        return {str(k): _prepare_for_log(v) for k, v in value.items()}
    if isinstance(value, (list, tuple, set)):
        return [_prepare_for_log(v) for v in value]
    try:
        json.dumps(value, ensure_ascii=False)
        return value
    except (TypeError, ValueError):
        return _truncate_for_log(repr(value))


def _ensure_exec_log_file() -> Path | None:
    global _EXEC_LOG_FILE, _EXEC_LOG_FAILED
    if not EXEC_LOG_ENABLED or _EXEC_LOG_FAILED:
        return None
    if _EXEC_LOG_FILE is not None:
        return _EXEC_LOG_FILE
    try:
        EXEC_LOG_DIR.mkdir(parents=True, exist_ok=True)
        filename = f"mcerv-{_EXEC_LOG_SESSION_ID}-pid{os.getpid()}.jsonl"
        _EXEC_LOG_FILE = (EXEC_LOG_DIR / filename).resolve()
        return _EXEC_LOG_FILE
    except OSError as exc:
        _EXEC_LOG_FAILED = True
        print(f"[warn] failed to initialize execution log file: {exc}")
        return None


# ---------------------------------------------------------------------------
# Public API
# ---------------------------------------------------------------------------

def get_exec_log_path() -> str | None:
    """Path of this session's JSONL file, or None when logging is off or broken."""
    path = _ensure_exec_log_file()
    return str(path) if path else None


def log_event(event: str, **fields: Any) -> None:
    """Record *event* with *fields* as one JSON line.

    Called from the prompt thread, the output sink and server reader threads,
    so writes go through ``_EXEC_LOG_LOCK``.  Field values such as paths,
    exceptions and byte strings are made JSON-safe first.
    """
    if not EXEC_LOG_ENABLED:
        return
    path = _ensure_exec_log_file()
    if path is None:
        return
    record: dict[str, Any] = {
        "ts": datetime.now(timezone.utc).isoformat(),
        "session_id": _EXEC_LOG_SESSION_ID,
        "thread": threading.current_thread().name,
        "event": str(event or "unknown"),
    }
    record.update({k: _prepare_for_log(v) for k, v in fields.items()})
    line = json.dumps(record, ensure_ascii=False)
    try:
        with _EXEC_LOG_LOCK:
            with path.open("a", encoding="utf-8") as f:
                f.write(line + "\n")
    except OSError as exc:
        global _EXEC_LOG_FAILED
        _EXEC_LOG_FAILED = True
        print(f"[warn] failed to write execution log: {exc}")
