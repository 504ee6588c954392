"""Spawn a server process with piped stdin/stdout."""

from __future__ import annotations

import os
import subprocess
from pathlib import Path
from typing import Sequence


def server_env(java_home: str | None, base: dict[str, str] | None = None) -> dict[str, str]:
    """Environment for the child; ``java_home/bin`` goes first on PATH."""
    env = dict(os.environ if base is None else base)
    if java_home:
        java_bin = str(Path(java_home) / "bin")
        current = env.get("PATH", "")
        env["PATH"] = f"{java_bin}{os.pathsep}{current}" if current else java_bin
        env["JAVA_HOME"] = java_home
    return env


def spawn_server(command: Sequence[str], *, cwd: Path, java_home: str | None = None) -> subprocess.Popen:
    """Start *command* in *cwd*; stderr is merged into stdout.

    ``OSError`` (e.g. java not found) propagates to the caller.
    """
    return subprocess.Popen(
        list(command),
        cwd=str(cwd),
        env=server_env(java_home),
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        encoding="utf-8",
        errors="replace",
        bufsize=1,
    )


__all__ = [
    "server_env",
    "spawn_server",
]
