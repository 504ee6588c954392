"""Command tree: commands, sub-commands and the options they accept."""

from __future__ import annotations

import threading
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Callable, Iterable, Iterator

if TYPE_CHECKING:
    from .state import InterpreterState

Handler = Callable[["InterpreterState", list[str]], None]


@dataclass(frozen=True)
class OptionSpec:
    name: str
    help: str = ""
    takes_value: bool = False

    @property
    def flag(self) -> str:
        return f"--{self.name}"


@dataclass(frozen=True)
class CommandNode:
    name: str
    children: tuple[CommandNode, ...] = ()
    options: tuple[OptionSpec, ...] = ()
    help: str = ""
    handler: Handler | None = field(default=None, compare=False)

    def child(self, name: str) -> CommandNode | None:
        for node in self.children:
            if node.name == name:
                return node
        return None

    def walk(self) -> Iterator[CommandNode]:
        yield self
        for node in self.children:
            yield from node.walk()

    def value_option_flags(self) -> set[str]:
        """Every ``--name`` in this subtree that consumes the following token."""
        return {opt.flag for node in self.walk() for opt in node.options if opt.takes_value}


class CommandTree:
    """Ordered set of top-level commands.

    Nodes are immutable.  A dynamic subtree (e.g. one child per server
    instance) is rebuilt and swapped in with ``replace_children``; readers
    always see either the old or the new root tuple.
    """

    def __init__(self, commands: Iterable[CommandNode] = ()) -> None:
        self._roots: tuple[CommandNode, ...] = tuple(commands)
        self._swap_lock = threading.Lock()

    @property
    def commands(self) -> tuple[CommandNode, ...]:
        return self._roots

    def find(self, name: str) -> CommandNode | None:
        for node in self._roots:
            if node.name == name:
                return node
        return None

    def matching(self, prefix: str) -> list[CommandNode]:
        return [node for node in self._roots if node.name.startswith(prefix)]

    def replace_children(self, command: str, children: Iterable[CommandNode]) -> None:
        new_children = tuple(children)
        with self._swap_lock:
            roots = self._roots
            if not any(node.name == command for node in roots):
                raise KeyError(command)
            self._roots = tuple(
                replace(node, children=new_children) if node.name == command else node
                for node in roots
            )


def leaf_nodes(names: Iterable[str], *, help_text: str = "") -> tuple[CommandNode, ...]:
    """Handler-less leaves, one per name, in the given order."""
    seen: set[str] = set()
    nodes: list[CommandNode] = []
    for name in names:
        clean = str(name or "").strip()
        if not clean or clean in seen:
            continue
        seen.add(clean)
        nodes.append(CommandNode(name=clean, help=help_text))
    return tuple(nodes)


__all__ = [
    "Handler",
    "OptionSpec",
    "CommandNode",
    "CommandTree",
    "leaf_nodes",
]
