"""Stable public API for the command shell.

Upper layers (the CLI entry point, tests, embedding code) import from here
rather than from the individual shell modules.
"""

from __future__ import annotations

from pathlib import Path
from typing import Callable, Iterable

from mcerv.config import INSTANCES_DIR

from .command_tree import CommandNode, CommandTree, Handler, OptionSpec
from .completion import Candidate, CommandCompleter, complete
from .context import DEFAULT_CONTEXT, AttachedProcess, ContextEngine, DefaultContext
from .dispatcher import DispatchResult, dispatch
from .interpreter import handle_interrupt, handle_line, run_repl
from .output import OutputSink
from .resolver import Resolution, find_deepest_match, resolve_handler
from .state import InterpreterState, Server
from .tokenizer import join, tokenize


def parse_line(line: str) -> list[str]:
    return tokenize(line)


def quote_tokens(tokens: Iterable[str]) -> str:
    return join(tokens)


def resolve(tree: CommandTree, tokens: list[str]) -> Resolution:
    return resolve_handler(tree, tokens)


def complete_line(tree: CommandTree, line: str, cursor: int) -> tuple[int, list[Candidate]]:
    return complete(tree, line, cursor)


def execute_line(state: InterpreterState, line: str) -> DispatchResult | None:
    return handle_line(state, line)


def create_state(
    tree: CommandTree,
    *,
    instances_dir: Path | None = None,
    writer: Callable[[str], None] | None = None,
    debug: bool | None = None,
) -> InterpreterState:
    """Build interpreter state and populate the server-name subtrees."""
    state = InterpreterState(
        tree=tree,
        instances_dir=instances_dir or INSTANCES_DIR,
        printer=OutputSink(writer),
    )
    if debug is not None:
        state.debug = debug
    state.refresh_server_names()
    return state


__all__ = [
    "Handler",
    "OptionSpec",
    "CommandNode",
    "CommandTree",
    "Candidate",
    "CommandCompleter",
    "DefaultContext",
    "AttachedProcess",
    "DEFAULT_CONTEXT",
    "ContextEngine",
    "DispatchResult",
    "dispatch",
    "OutputSink",
    "Resolution",
    "find_deepest_match",
    "InterpreterState",
    "Server",
    "parse_line",
    "quote_tokens",
    "resolve",
    "complete_line",
    "execute_line",
    "handle_interrupt",
    "run_repl",
    "create_state",
]
