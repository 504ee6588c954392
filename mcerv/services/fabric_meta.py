"""Fabric meta service: game / loader / installer versions and server jars."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from mcerv.config import FABRIC_META_URL

from .http import HttpClient


@dataclass(frozen=True)
class FabricVersions:
    game: str
    loader: str
    installer: str


@dataclass(frozen=True)
class VersionEntry:
    version: str
    stable: bool

    @classmethod
    def from_json(cls, raw: Any) -> VersionEntry:
        if not isinstance(raw, dict):
            return cls(version=str(raw or ""), stable=False)
        return cls(version=str(raw.get("version") or ""), stable=bool(raw.get("stable")))


def server_jar_name(versions: FabricVersions) -> str:
    return (
        f"fabric-server-mc.{versions.game}-loader.{versions.loader}"
        f"-launcher.{versions.installer}.jar"
    )


def server_jar_url(versions: FabricVersions, *, base_url: str = FABRIC_META_URL) -> str:
    return (
        f"{base_url}/versions/loader/{versions.game}/{versions.loader}"
        f"/{versions.installer}/server/jar"
    )


async def fetch_versions(
    client: HttpClient,
    *,
    base_url: str = FABRIC_META_URL,
) -> tuple[list[VersionEntry], list[VersionEntry], list[VersionEntry]]:
    """Fetch the game, loader and installer version lists concurrently."""
    games, loaders, installers = await asyncio.gather(
        client.aget_json(f"{base_url}/versions/game"),
        client.aget_json(f"{base_url}/versions/loader"),
        client.aget_json(f"{base_url}/versions/installer"),
    )
    return (
        [VersionEntry.from_json(v) for v in games or []],
        [VersionEntry.from_json(v) for v in loaders or []],
        [VersionEntry.from_json(v) for v in installers or []],
    )


def latest_stable(entries: Iterable[VersionEntry], *, label: str) -> str:
    for entry in entries:
        if entry.stable and entry.version:
            return entry.version
    raise LookupError(f"Failed to find stable {label} version")


async def fetch_latest_stable_versions(client: HttpClient) -> FabricVersions:
    games, loaders, installers = await fetch_versions(client)
    return FabricVersions(
        game=latest_stable(games, label="minecraft"),
        loader=latest_stable(loaders, label="fabric loader"),
        installer=latest_stable(installers, label="fabric installer"),
    )


def _column(entries: list[VersionEntry], stable_only: bool) -> list[str]:
    return [
        f"{e.version} ({'stable' if e.stable else 'unstable'})"
        for e in entries
        if e.stable or not stable_only
    ]


def format_versions_table(
    games: list[VersionEntry],
    loaders: list[VersionEntry],
    installers: list[VersionEntry],
    *,
    stable_only: bool = True,
) -> str:
    """Three side-by-side columns; shorter columns are padded with ``-``."""
    headers = ("Minecraft Version", "Fabric Loader Version", "Installer Version")
    columns = [_column(games, stable_only), _column(loaders, stable_only), _column(installers, stable_only)]
    height = max(len(col) for col in columns)
    rows = [headers] + [
        tuple(col[i] if i < len(col) else "-" for col in columns)
        for i in range(height)
    ]
    widths = [max(len(row[i]) for row in rows) for i in range(len(headers))]
    border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
    lines = [border]
    for idx, row in enumerate(rows):
        lines.append("| " + " | ".join(cell.ljust(w) for cell, w in zip(row, widths)) + " |")
        if idx == 0:
            lines.append(border)
    lines.append(border)
    return "\n".join(lines)


async def download_server(
    client: HttpClient,
    versions: FabricVersions,
    save_dir: Path,
    *,
    show_progress: bool = False,
) -> str:
    """Download the server launcher jar into *save_dir*; returns its file name."""
    filename = server_jar_name(versions)
    await client.adownload(server_jar_url(versions), save_dir / filename, show_progress=show_progress)
    return filename


__all__ = [
    "FabricVersions",
    "VersionEntry",
    "server_jar_name",
    "server_jar_url",
    "fetch_versions",
    "latest_stable",
    "fetch_latest_stable_versions",
    "format_versions_table",
    "download_server",
]
