"""Mutable state shared by every command handler."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING

from mcerv.config import DEBUG, INSTANCES_DIR
from mcerv.services.http import HttpClient
from mcerv.utils.path_utils import list_instance_names

from .command_tree import CommandTree, leaf_nodes
from .context import ContextEngine
from .error_model import HandlerError
from .output import OutputSink
from .runtime import AsyncRunner

if TYPE_CHECKING:
    from mcerv.services.jar_parser import ServerInfo
    from mcerv.services.server_config import ServerConfig


@dataclass
class Server:
    name: str
    directory: Path
    config: ServerConfig
    info: ServerInfo | None = None


@dataclass
class InterpreterState:
    tree: CommandTree
    instances_dir: Path = INSTANCES_DIR
    printer: OutputSink = field(default_factory=OutputSink)
    context: ContextEngine = field(default_factory=ContextEngine)
    runtime: AsyncRunner = field(default_factory=AsyncRunner)
    http: HttpClient = field(default_factory=HttpClient)
    selected_server: Server | None = None
    server_names: list[str] = field(default_factory=list)
    # Commands whose children are the instance names.
    server_name_commands: tuple[str, ...] = ("select",)
    debug: bool = DEBUG
    exit_requested: bool = False

    def echo(self, text: object = "") -> None:
        self.printer.emit(text)

    def require_selected(self) -> Server:
        if self.selected_server is None:
            raise HandlerError("No server selected.")
        return self.selected_server

    def refresh_server_names(self) -> list[str]:
        """Re-read the instances directory and rebuild the name subtrees."""
        names = list_instance_names(self.instances_dir)
        self.server_names = names
        nodes = leaf_nodes(names, help_text="Server instance")
        for command in self.server_name_commands:
            if self.tree.find(command) is not None:
                self.tree.replace_children(command, nodes)
        return names

    def close(self) -> None:
        self.runtime.close()
        self.http.close()
        self.printer.close()


__all__ = [
    "Server",
    "InterpreterState",
]
