"""Per-instance JSON config: memory, server jar and JAVA_HOME."""

from __future__ import annotations

import json
import os
import subprocess
from dataclasses import asdict, dataclass
from pathlib import Path
from typing import Any

from mcerv.config import CONFIG_FILE_NAME, DEFAULT_MEMORY

from .jar_parser import InvalidServerDirError, single_jar


@dataclass
class ServerConfig:
    jar_name: str
    min_memory: str = DEFAULT_MEMORY
    max_memory: str = DEFAULT_MEMORY
    java_home: str | None = None

    @classmethod
    def from_json(cls, raw: dict[str, Any]) -> ServerConfig:
        jar_name = str(raw.get("jar_name") or "").strip()
        if not jar_name:
            raise ValueError("config is missing jar_name")
        java_home = raw.get("java_home")
        return cls(
            jar_name=jar_name,
            min_memory=str(raw.get("min_memory") or DEFAULT_MEMORY),
            max_memory=str(raw.get("max_memory") or DEFAULT_MEMORY),
            java_home=str(java_home) if java_home else None,
        )

    @classmethod
    def load_or_create(cls, server_dir: Path) -> tuple[ServerConfig, list[str]]:
        """Load the instance config, creating a default one on first use.

        When exactly one jar sits in *server_dir* its name wins over the stored
        one, so a manually swapped jar is picked up.  With several jars the
        stored name is kept; a first-time config then cannot be created.
        Returns the config plus human-readable notes about what changed.
        """
        path = server_dir / CONFIG_FILE_NAME
        notes: list[str] = []
        if not path.exists():
            notes.append("mcerv config file does not exist, creating a new one with default values...")
            config = cls(jar_name=single_jar(server_dir).name)
            config.save(server_dir)
            return config, notes

        config = cls.from_json(json.loads(path.read_text(encoding="utf-8")))
        try:
            current = single_jar(server_dir).name
        except InvalidServerDirError as exc:
            if exc.reason != InvalidServerDirError.MULTIPLE_JARS:
                raise
            return config, notes
        if current != config.jar_name:
            notes.append(f"Detected jar file change: {config.jar_name} -> {current}, updating config...")
            config.jar_name = current
            config.save(server_dir)
        return config, notes

    def save(self, server_dir: Path) -> Path:
        path = server_dir / CONFIG_FILE_NAME
        path.write_text(json.dumps(asdict(self), indent=2) + "\n", encoding="utf-8")
        return path

    def start_command(self) -> list[str]:
        return ["java", f"-Xmx{self.max_memory}", f"-Xms{self.min_memory}", "-jar", self.jar_name, "nogui"]

    def start_script(self, *, windows: bool | None = None) -> tuple[str, str]:
        """Return ``(file_extension, script_text)`` for the target platform."""
        if windows is None:
            windows = os.name == "nt"
        if windows:
            command = subprocess.list2cmdline(self.start_command())
            java_home = ""
            if self.java_home:
                java_home = f"set JAVA_HOME={self.java_home}\nset PATH=%JAVA_HOME%\\bin;%PATH%\n"
            return "bat", (
                "@echo off\n"
                f"{java_home}\n"
                "echo Using Java: %JAVA_HOME%\n"
                "java --version\n"
                f"{command}\n"
            )
        from mcerv.shell.tokenizer import join

        command = join(self.start_command())
        java_home = ""
        if self.java_home:
            java_home = f'export JAVA_HOME="{self.java_home}"\nexport PATH="$JAVA_HOME/bin:$PATH"\n'
        return "sh", (
            "#!/usr/bin/env bash\n"
            f"{java_home}\n"
            "echo Using Java: $JAVA_HOME\n"
            "java --version\n"
            f"{command}\n"
        )

    def describe(self) -> str:
        return "\n".join(
            [
                f"Max Memory: {self.max_memory}",
                f"Min Memory: {self.min_memory}",
                f"Executable Jar: {self.jar_name}",
                f"Java Home: {self.java_home or 'Not Set'}",
            ]
        )


__all__ = [
    "ServerConfig",
]
