"""Server and mod jar inspection."""

from __future__ import annotations

import hashlib
import zipfile
from pathlib import Path

import pytest

from jars import write_fabric_jar, write_forge_jar
from mcerv.services.jar_parser import (
    InvalidServerDirError,
    ServerFork,
    ServerInfo,
    ServerInfoError,
    calculate_hash,
    parse_manifest,
    parse_properties,
    single_jar,
)


def test_fabric_jar_detection(tmp_path: Path) -> None:
    info = ServerInfo.from_jar(write_fabric_jar(tmp_path / "server.jar", "1.20.4"))
    assert info.server_fork is ServerFork.FABRIC
    assert info.game_version == "1.20.4"
    assert info.describe() == "Server Fork: Fabric\nMinecraft Version: 1.20.4"


def test_forge_jar_detection(tmp_path: Path) -> None:
    info = ServerInfo.from_jar(write_forge_jar(tmp_path / "server.jar"))
    assert info.server_fork is ServerFork.FORGE
    assert info.game_version == "1.21.8"


def test_unknown_fork_is_rejected(tmp_path: Path) -> None:
    path = tmp_path / "vanilla.jar"
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr("META-INF/MANIFEST.MF", "Main-Class: net.minecraft.server.Main\n")
    with pytest.raises(ServerInfoError):
        ServerInfo.from_jar(path)


def test_not_a_zip_is_server_info_error(tmp_path: Path) -> None:
    path = tmp_path / "broken.jar"
    path.write_bytes(b"not a zip")
    with pytest.raises(ServerInfoError):
        ServerInfo.from_jar(path)


def test_single_jar_rules(tmp_path: Path) -> None:
    with pytest.raises(InvalidServerDirError) as info:
        single_jar(tmp_path)
    assert info.value.reason == InvalidServerDirError.NO_JAR

    (tmp_path / "a.jar").write_bytes(b"")
    (tmp_path / "notes.txt").write_text("x")
    assert single_jar(tmp_path).name == "a.jar"

    (tmp_path / "b.jar").write_bytes(b"")
    with pytest.raises(InvalidServerDirError) as info:
        single_jar(tmp_path)
    assert info.value.reason == InvalidServerDirError.MULTIPLE_JARS


def test_calculate_hash_is_sha1(tmp_path: Path) -> None:
    path = tmp_path / "mod.jar"
    path.write_bytes(b"mod contents")
    assert calculate_hash(path) == hashlib.sha1(b"mod contents").hexdigest()


def test_properties_and_manifest_parsing() -> None:
    assert parse_properties("# comment\ngame-version = 1.21\nbroken\n") == {"game-version": "1.21"}
    assert parse_manifest("Main-Class: a.b.C\nIgnored\n") == {"Main-Class": "a.b.C"}
