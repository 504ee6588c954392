"""Installed-mod status and the concurrent batch updater."""

from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Callable

from mcerv.services import modrinth
from mcerv.services.http import HttpClient
from mcerv.services.jar_parser import calculate_hash, jar_files
from mcerv.services.modrinth import ModVersion
from mcerv.utils.logging_utils import log_event


@dataclass(frozen=True)
class InstalledMod:
    path: Path
    sha1: str
    slug: str
    current: ModVersion | None = None
    latest: ModVersion | None = None

    @property
    def has_update(self) -> bool:
        return (
            self.current is not None
            and self.latest is not None
            and bool(self.latest.sha1)
            and self.latest.sha1 != self.sha1
        )

    def status_line(self) -> str:
        if self.current is None:
            return f"{self.path.name}: not found on Modrinth"
        head = f"{self.slug}: `{self.current.name}`"
        if self.latest is None:
            return f"{head} no compatible version found"
        if self.has_update:
            return f"{head} -> `{self.latest.name}`"
        return f"{head} [OK] up-to-date"


@dataclass
class UpdateReport:
    updated: list[str] = field(default_factory=list)
    failed: list[tuple[str, str]] = field(default_factory=list)
    delete_failures: list[tuple[Path, str]] = field(default_factory=list)

    def summary_lines(self) -> list[str]:
        lines = [f"Updated {len(self.updated)} mod(s)."]
        for slug, error in self.failed:
            lines.append(f"Failed to update {slug}: {error}")
        for path, error in self.delete_failures:
            lines.append(f"Failed to delete old jar file {path.name}: {error}")
        return lines


Downloader = Callable[[InstalledMod], Awaitable[Path]]


async def collect_installed_mods(client: HttpClient, mods_dir: Path, game_version: str) -> list[InstalledMod]:
    """Hash every jar in *mods_dir* and look up current and latest versions."""
    paths = await asyncio.to_thread(jar_files, mods_dir)
    hashes = [await asyncio.to_thread(calculate_hash, p) for p in paths]
    current, latest = await asyncio.gather(
        modrinth.get_versions_by_hashes(client, hashes),
        modrinth.get_latest_versions(client, hashes, [game_version]),
    )
    slugs = await modrinth.get_project_slug_map(client, (v.project_id for v in current.values()))
    mods = []
    for path, sha1 in zip(paths, hashes):
        version = current.get(sha1)
        slug = slugs.get(version.project_id, version.project_id) if version else path.stem
        mods.append(InstalledMod(path=path, sha1=sha1, slug=slug, current=version, latest=latest.get(sha1)))
    return mods


async def apply_updates(
    updates: list[InstalledMod],
    download: Downloader,
    *,
    remove: Callable[[Path], None] = Path.unlink,
) -> UpdateReport:
    """Download every update concurrently, then delete superseded jars.

    A failed download is reported and its old jar kept.  A failed deletion is
    logged and reported; neither aborts the rest of the batch.
    """
    report = UpdateReport()
    results = await asyncio.gather(*(download(mod) for mod in updates), return_exceptions=True)
    for mod, result in zip(updates, results):
        if isinstance(result, BaseException):
            log_event("mod_download_failed", slug=mod.slug, path=mod.path, error=result)
            report.failed.append((mod.slug, str(result) or type(result).__name__))
            continue
        report.updated.append(mod.slug)
        if Path(result) == mod.path:
            continue
        try:
            remove(mod.path)
        except OSError as exc:
            log_event("mod_delete_failed", slug=mod.slug, path=mod.path, error=exc)
            report.delete_failures.append((mod.path, str(exc)))
    return report


def modrinth_downloader(client: HttpClient, mods_dir: Path) -> Downloader:
    async def _download(mod: InstalledMod) -> Path:
        if mod.latest is None:
            raise LookupError(f"no update available for {mod.slug}")
        return await modrinth.download_version(client, mod.latest, mods_dir)

    return _download


async def check_support(client: HttpClient, mods_dir: Path, game_version: str) -> list[tuple[str, bool | None, str]]:
    """Per-mod ``(slug, supported, error)``; one failed lookup does not stop the rest."""
    paths = await asyncio.to_thread(jar_files, mods_dir)
    hashes = [await asyncio.to_thread(calculate_hash, p) for p in paths]
    current = await modrinth.get_versions_by_hashes(client, hashes)
    slugs = await modrinth.get_project_slug_map(client, (v.project_id for v in current.values()))
    targets = [slugs.get(v.project_id, v.project_id) for v in current.values()]
    results = await asyncio.gather(
        *(modrinth.get_project_versions(client, slug, [game_version]) for slug in targets),
        return_exceptions=True,
    )
    out: list[tuple[str, bool | None, str]] = []
    for slug, result in zip(targets, results):
        if isinstance(result, BaseException):
            log_event("mod_support_check_failed", slug=slug, error=result)
            out.append((slug, None, str(result)))
        else:
            out.append((slug, bool(result), ""))
    return out


__all__ = [
    "InstalledMod",
    "UpdateReport",
    "collect_installed_mods",
    "apply_updates",
    "modrinth_downloader",
    "check_support",
]
