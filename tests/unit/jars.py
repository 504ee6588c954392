from __future__ import annotations

import zipfile
from pathlib import Path


def write_fabric_jar(path: Path, game_version: str = "1.21.1") -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(
            "META-INF/MANIFEST.MF",
            "Manifest-Version: 1.0\nMain-Class: net.fabricmc.installer.ServerLauncher\n",
        )
        archive.writestr("install.properties", f"fabric-loader-version=0.16.5\ngame-version={game_version}\n")
    return path


def write_forge_jar(path: Path, game_version: str = "1.21.8") -> Path:
    with zipfile.ZipFile(path, "w") as archive:
        archive.writestr(
            "META-INF/MANIFEST.MF",
            "Manifest-Version: 1.0\nMain-Class: net.minecraftforge.bootstrap.ForgeBootstrap\n",
        )
        archive.writestr(
            "bootstrap-shim.list",
            f"abc123 net.minecraftforge:forge:{game_version}-58.1.0:server net/minecraftforge/forge.jar\n",
        )
    return path
