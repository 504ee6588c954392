"""Instance directory helpers.

A server instance is a directory ``<instances_dir>/<name>`` holding the
server jar, its config file and whatever the server writes at runtime.
"""

from __future__ import annotations

from pathlib import Path

from mcerv.config import INSTANCES_DIR


def _resolve_dir(path: str | Path | None, *, default: Path = INSTANCES_DIR) -> Path:
    if path is None or not str(path).strip():
        return default
    resolved = Path(str(path).strip()).expanduser()
    if not resolved.is_absolute():
        resolved = (Path.cwd() / resolved).resolve()
    return resolved


def ensure_instances_dir(instances_dir: Path) -> Path:
    """Create the instances directory if needed; ``OSError`` propagates."""
    instances_dir.mkdir(parents=True, exist_ok=True)
    return instances_dir


def list_instance_names(instances_dir: Path) -> list[str]:
    """Sorted names of every instance directory (hidden entries skipped)."""
    if not instances_dir.is_dir():
        return []
    return sorted(
        entry.name
        for entry in instances_dir.iterdir()
        if entry.is_dir() and not entry.name.startswith(".")
    )


def server_dir(instances_dir: Path, name: str) -> Path:
    return instances_dir / str(name or "").strip()


def existing_server_dir(instances_dir: Path, name: str) -> Path | None:
    """Return the instance directory for *name*, or None when it does not exist."""
    clean = str(name or "").strip()
    if not clean or clean in {".", ".."} or "/" in clean or "\\" in clean:
        return None
    path = server_dir(instances_dir, clean)
    return path if path.is_dir() else None


__all__ = [
    "_resolve_dir",
    "ensure_instances_dir",
    "list_instance_names",
    "server_dir",
    "existing_server_dir",
]
