"""Configuration and constants for the mcerv shell.

Every environment-variable lookup lives here so the rest of the codebase can
simply ``from mcerv.config import …``.  Values are read once at import time.
"""

from __future__ import annotations

import os
from pathlib import Path

from dotenv import load_dotenv

# ---------------------------------------------------------------------------
# Bootstrap
# ---------------------------------------------------------------------------
ENV_FILE = Path(os.getenv("MCERV_ENV_FILE") or (Path.cwd() / ".env")).expanduser().resolve()
load_dotenv(dotenv_path=ENV_FILE)


# ---------------------------------------------------------------------------
# Helpers for parsing env vars
# ---------------------------------------------------------------------------
def _resolve_env_path(name: str, default: str) -> Path:
    raw = os.getenv(name, default)
    text = str(raw or "").strip() or default
    path = Path(text).expanduser()
    if not path.is_absolute():
        path = (Path.cwd() / path).resolve()
    return path


def _env_flag(name: str, default: bool = False) -> bool:
    raw = os.getenv(name)
    if raw is None:
        return default
    return raw.strip().lower() not in {"0", "false", "no", "off"}


def _env_int(name: str, default: int = 0) -> int:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return int(raw.strip())
    except ValueError:
        return default


def _env_float(name: str, default: float = 0.0) -> float:
    raw = os.getenv(name)
    if raw is None:
        return default
    try:
        return float(raw.strip())
    except ValueError:
        return default


# ---------------------------------------------------------------------------
# Instances / servers
# ---------------------------------------------------------------------------
INSTANCES_DIR = _resolve_env_path("MCERV_INSTANCES_DIR", "instances")
HISTORY_FILE = _resolve_env_path("MCERV_HISTORY_FILE", ".mcerv_history")
CONFIG_FILE_NAME = (os.getenv("MCERV_CONFIG_FILE_NAME") or "mcerv_config.json").strip()
DEFAULT_MEMORY = (os.getenv("MCERV_DEFAULT_MEMORY") or "4G").strip()
EULA_FILE_NAME = "eula.txt"
EULA_URL = "https://aka.ms/MinecraftEULA"
MODS_DIR_NAME = "mods"

# ---------------------------------------------------------------------------
# Attached server process
# ---------------------------------------------------------------------------
SERVER_SHUTDOWN_COMMAND = (os.getenv("MCERV_SHUTDOWN_COMMAND") or "stop").strip()
# 0 waits for the server forever.
SERVER_SHUTDOWN_TIMEOUT = max(0.0, _env_float("MCERV_SHUTDOWN_TIMEOUT", 120.0))
SERVER_TERMINATE_GRACE = max(0.0, _env_float("MCERV_TERMINATE_GRACE", 10.0))

# ---------------------------------------------------------------------------
# HTTP / remote metadata services
# ---------------------------------------------------------------------------
HTTP_TIMEOUT = max(1, _env_int("MCERV_HTTP_TIMEOUT", 30))
HTTP_RETRIES = max(1, _env_int("MCERV_HTTP_RETRIES", 3))
HTTP_RETRY_BACKOFF = max(0.0, _env_float("MCERV_HTTP_RETRY_BACKOFF", 2.0))
HTTP_CHUNK_SIZE = max(1024, _env_int("MCERV_HTTP_CHUNK_SIZE", 64 * 1024))
USER_AGENT = (os.getenv("MCERV_USER_AGENT") or "mcerv/0.1.0 (interactive server shell)").strip()
FABRIC_META_URL = (os.getenv("FABRIC_META_URL") or "https://meta.fabricmc.net/v2").rstrip("/")
MODRINTH_API_URL = (os.getenv("MODRINTH_API_URL") or "https://api.modrinth.com/v2").rstrip("/")
MODRINTH_SEARCH_LIMIT = max(1, _env_int("MODRINTH_SEARCH_LIMIT", 10))

# ---------------------------------------------------------------------------
# Shell
# ---------------------------------------------------------------------------
PROMPT = os.getenv("MCERV_PROMPT", ">> ")
DEBUG = _env_flag("DEBUG", False)

# ---------------------------------------------------------------------------
# Execution logging
# ---------------------------------------------------------------------------
EXEC_LOG_ENABLED = _env_flag("EXEC_LOG_ENABLED", False)
EXEC_LOG_DIR = _resolve_env_path("EXEC_LOG_DIR", "logs")
EXEC_LOG_MAX_CHARS = max(0, _env_int("EXEC_LOG_MAX_CHARS", 0))
