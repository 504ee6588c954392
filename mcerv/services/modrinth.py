"""Modrinth API client: search, version lookup by file hash, downloads."""

from __future__ import annotations

import json
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Iterable

from mcerv.config import MODRINTH_API_URL

from .http import HttpClient

HASH_ALGORITHM = "sha1"
LOADER = "fabric"


@dataclass(frozen=True)
class ModVersion:
    id: str
    project_id: str
    name: str
    version_number: str
    file_url: str = ""
    file_name: str = ""
    sha1: str = ""
    game_versions: tuple[str, ...] = ()
    loaders: tuple[str, ...] = ()
    featured: bool = False

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> ModVersion:
        files = [f for f in raw.get("files") or [] if isinstance(f, dict)]
        primary = next((f for f in files if f.get("primary")), files[0] if files else {})
        hashes = primary.get("hashes") or {}
        return cls(
            id=str(raw.get("id") or ""),
            project_id=str(raw.get("project_id") or ""),
            name=str(raw.get("name") or ""),
            version_number=str(raw.get("version_number") or ""),
            file_url=str(primary.get("url") or ""),
            file_name=str(primary.get("filename") or ""),
            sha1=str(hashes.get(HASH_ALGORITHM) or ""),
            game_versions=tuple(str(v) for v in raw.get("game_versions") or []),
            loaders=tuple(str(v) for v in raw.get("loaders") or []),
            featured=bool(raw.get("featured")),
        )


@dataclass(frozen=True)
class SearchHit:
    slug: str
    title: str
    author: str
    description: str
    downloads: int = 0
    categories: tuple[str, ...] = ()
    versions: tuple[str, ...] = ()

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> SearchHit:
        return cls(
            slug=str(raw.get("slug") or ""),
            title=str(raw.get("title") or ""),
            author=str(raw.get("author") or ""),
            description=str(raw.get("description") or ""),
            downloads=int(raw.get("downloads") or 0),
            categories=tuple(str(c) for c in raw.get("categories") or []),
            versions=tuple(str(v) for v in raw.get("versions") or []),
        )


@dataclass(frozen=True)
class SearchResult:
    hits: tuple[SearchHit, ...] = ()
    total_hits: int = 0

    def render(self) -> str:
        # Plain blocks rather than a table; long descriptions break table layouts.
        if not self.hits:
            return "No results."
        blocks = []
        for hit in self.hits:
            blocks.append(
                "\n".join(
                    [
                        f"Title: {hit.title}",
                        f"Slug: {hit.slug}",
                        f"Author: {hit.author}",
                        f"Downloads: {hit.downloads}",
                        f"Description: {hit.description}",
                        f"Categories: {', '.join(hit.categories)}",
                        f"Versions: {', '.join(hit.versions)}",
                        "=======================================",
                    ]
                )
            )
        return "\n".join(blocks)


def build_facets(extra: Iterable[str], game_version: str) -> list[list[str]]:
    """AND-ed facet groups: the user's facets plus game version and loader."""
    facets = [[f.strip()] for f in extra if f and f.strip()]
    facets.append([f"versions:{game_version}"])
    facets.append([f"categories:{LOADER}"])
    return facets


async def search(
    client: HttpClient,
    query: str,
    facets: list[list[str]],
    *,
    index: str | None = None,
    limit: str | int | None = None,
) -> SearchResult:
    params: dict[str, Any] = {"query": query, "facets": json.dumps(facets)}
    if index:
        params["index"] = index
    if limit:
        params["limit"] = str(limit)
    raw = await client.aget_json(f"{MODRINTH_API_URL}/search", params=params)
    raw = raw if isinstance(raw, dict) else {}
    return SearchResult(
        hits=tuple(SearchHit.from_json(h) for h in raw.get("hits") or [] if isinstance(h, dict)),
        total_hits=int(raw.get("total_hits") or 0),
    )


async def get_versions_by_hashes(client: HttpClient, hashes: list[str]) -> dict[str, ModVersion]:
    """Map each known file hash to the Modrinth version it belongs to."""
    if not hashes:
        return {}
    raw = await client.apost_json(
        f"{MODRINTH_API_URL}/version_files",
        {"hashes": hashes, "algorithm": HASH_ALGORITHM},
    )
    return {h: ModVersion.from_json(v) for h, v in (raw or {}).items() if isinstance(v, dict)}


async def get_latest_versions(
    client: HttpClient,
    hashes: list[str],
    game_versions: list[str],
) -> dict[str, ModVersion]:
    """Latest compatible version for each file hash (missing when none exists)."""
    if not hashes:
        return {}
    raw = await client.apost_json(
        f"{MODRINTH_API_URL}/version_files/update",
        {
            "hashes": hashes,
            "algorithm": HASH_ALGORITHM,
            "loaders": [LOADER],
            "game_versions": game_versions,
        },
    )
    return {h: ModVersion.from_json(v) for h, v in (raw or {}).items() if isinstance(v, dict)}


async def get_project_slug_map(client: HttpClient, project_ids: Iterable[str]) -> dict[str, str]:
    ids = sorted({pid for pid in project_ids if pid})
    if not ids:
        return {}
    raw = await client.aget_json(f"{MODRINTH_API_URL}/projects", params={"ids": json.dumps(ids)})
    return {
        str(p.get("id")): str(p.get("slug") or p.get("id"))
        for p in raw or []
        if isinstance(p, dict)
    }


async def get_project_versions(
    client: HttpClient,
    slug: str,
    game_versions: list[str],
    *,
    featured: bool | None = None,
) -> list[ModVersion]:
    params: dict[str, Any] = {
        "loaders": json.dumps([LOADER]),
        "game_versions": json.dumps(game_versions),
    }
    if featured is not None:
        params["featured"] = "true" if featured else "false"
    raw = await client.aget_json(f"{MODRINTH_API_URL}/project/{slug}/version", params=params)
    return [ModVersion.from_json(v) for v in raw or [] if isinstance(v, dict)]


def format_versions(versions: list[ModVersion]) -> str:
    if not versions:
        return "No versions found."
    lines = []
    for v in versions:
        star = " *" if v.featured else ""
        lines.append(
            f"{v.id}  {v.version_number}  {v.name}{star}  "
            f"[{', '.join(v.game_versions)}]"
        )
    return "\n".join(lines)


async def get_version(client: HttpClient, version_id: str) -> ModVersion:
    raw = await client.aget_json(f"{MODRINTH_API_URL}/version/{version_id}")
    if not isinstance(raw, dict):
        raise LookupError(f"Unknown mod version: {version_id}")
    return ModVersion.from_json(raw)


async def download_version(client: HttpClient, version: ModVersion, save_dir: Path) -> Path:
    if not version.file_url or not version.file_name:
        raise LookupError(f"Mod version {version.id} has no downloadable file")
    return await client.adownload(version.file_url, save_dir / version.file_name)


__all__ = [
    "ModVersion",
    "SearchHit",
    "SearchResult",
    "build_facets",
    "search",
    "get_versions_by_hashes",
    "get_latest_versions",
    "get_project_slug_map",
    "get_project_versions",
    "format_versions",
    "get_version",
    "download_version",
]
