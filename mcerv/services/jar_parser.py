"""Inspect server and mod jars: hashes, manifests, fork and game version."""

from __future__ import annotations

import enum
import hashlib
import zipfile
from dataclasses import dataclass
from pathlib import Path

_HASH_CHUNK = 1024 * 1024


class InvalidServerDirError(Exception):
    NO_JAR = "no .jar file found in server directory"
    MULTIPLE_JARS = "multiple .jar files found in server directory"

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class ServerInfoError(Exception):
    pass


class ServerFork(enum.Enum):
    FABRIC = "Fabric"
    FORGE = "Forge"

    def __str__(self) -> str:
        return self.value


def calculate_hash(path: Path) -> str:
    """Hex SHA1 of the file contents (Modrinth's lookup key)."""
    digest = hashlib.sha1()
    with path.open("rb") as fh:
        for chunk in iter(lambda: fh.read(_HASH_CHUNK), b""):
            digest.update(chunk)
    return digest.hexdigest()


def jar_files(directory: Path) -> list[Path]:
    """Every ``*.jar`` file directly inside *directory*, sorted by name."""
    return sorted(p for p in directory.iterdir() if p.is_file() and p.suffix == ".jar")


def single_jar(directory: Path) -> Path:
    jars = jar_files(directory)
    if not jars:
        raise InvalidServerDirError(InvalidServerDirError.NO_JAR)
    if len(jars) > 1:
        raise InvalidServerDirError(InvalidServerDirError.MULTIPLE_JARS)
    return jars[0]


def read_file(archive: zipfile.ZipFile, name: str) -> str:
    try:
        data = archive.read(name)
    except KeyError as exc:
        raise ServerInfoError(f"{name} not found in JAR") from exc
    return data.decode("utf-8", errors="replace")


def parse_properties(content: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for line in content.splitlines():
        if line.lstrip().startswith("#") or "=" not in line:
            continue
        key, value = line.split("=", 1)
        out[key.strip()] = value.strip()
    return out


def parse_manifest(content: str) -> dict[str, str]:
    out: dict[str, str] = {}
    for line in content.splitlines():
        if ": " in line:
            key, value = line.split(": ", 1)
            out[key] = value.strip()
    return out


def detect_server_fork(archive: zipfile.ZipFile) -> ServerFork:
    manifest = parse_manifest(read_file(archive, "META-INF/MANIFEST.MF"))
    main_class = manifest.get("Main-Class")
    if not main_class:
        raise ServerInfoError("Main-Class not found in MANIFEST.MF")
    if "net.fabricmc" in main_class:
        return ServerFork.FABRIC
    if "net.minecraftforge" in main_class:
        return ServerFork.FORGE
    raise ServerInfoError("Detected an unknown server fork. Probably not supported by mcerv")


def _fabric_game_version(archive: zipfile.ZipFile) -> str:
    props = parse_properties(read_file(archive, "install.properties"))
    version = props.get("game-version")
    if not version:
        raise ServerInfoError("Game version not found in install.properties")
    return version


def _forge_game_version(archive: zipfile.ZipFile) -> str:
    # HASH net.minecraftforge:forge:1.21.8-58.1.0:server net/minecraftforge/...
    content = read_file(archive, "bootstrap-shim.list")
    for line in content.splitlines():
        if "net.minecraftforge:forge:" in line and ":server" in line:
            parts = line.split(":")
            if len(parts) > 2 and parts[2]:
                return parts[2].split("-")[0]
    raise ServerInfoError("Game version not found in bootstrap-shim.list")


def detect_game_version(archive: zipfile.ZipFile, fork: ServerFork) -> str:
    if fork is ServerFork.FABRIC:
        return _fabric_game_version(archive)
    return _forge_game_version(archive)


@dataclass(frozen=True)
class ServerInfo:
    server_fork: ServerFork
    game_version: str

    @classmethod
    def from_jar(cls, jar_path: Path) -> ServerInfo:
        try:
            with zipfile.ZipFile(jar_path) as archive:
                fork = detect_server_fork(archive)
                return cls(server_fork=fork, game_version=detect_game_version(archive, fork))
        except zipfile.BadZipFile as exc:
            raise ServerInfoError(f"{jar_path.name} is not a valid jar: {exc}") from exc

    def describe(self) -> str:
        return f"Server Fork: {self.server_fork}\nMinecraft Version: {self.game_version}"


__all__ = [
    "InvalidServerDirError",
    "ServerInfoError",
    "ServerFork",
    "ServerInfo",
    "calculate_hash",
    "jar_files",
    "single_jar",
    "read_file",
    "parse_properties",
    "parse_manifest",
    "detect_server_fork",
    "detect_game_version",
]
