"""Prefix-aware tab completion over the command tree."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable

from prompt_toolkit.completion import Completer, Completion

from mcerv.utils.logging_utils import log_event

from .command_tree import CommandNode, CommandTree
from .context import AttachedProcess
from .error_model import ParseError
from .resolver import find_deepest_match
from .tokenizer import ends_with_whitespace, replace_offset, tokenize

if TYPE_CHECKING:
    from .state import InterpreterState


@dataclass(frozen=True)
class Candidate:
    insert_text: str
    display_text: str


def _node_candidate(node: CommandNode) -> Candidate:
    return Candidate(insert_text=node.name, display_text=node.help or node.name)


def _subcommand_candidates(node: CommandNode, last: str, trailing_space: bool) -> list[Candidate]:
    return [
        _node_candidate(child)
        for child in node.children
        if trailing_space or child.name.startswith(last)
    ]


def _option_candidates(node: CommandNode, tokens: list[str], prefix: str) -> list[Candidate]:
    show_all = prefix[-1].isspace() or prefix[-1] == "-"
    wanted = tokens[-1].lstrip("-")
    out: list[Candidate] = []
    for opt in node.options:
        if opt.flag in tokens:
            continue
        if show_all or opt.name.startswith(wanted):
            out.append(Candidate(insert_text=opt.flag, display_text=opt.help or opt.flag))
    return out


def complete(tree: CommandTree, line: str, cursor: int) -> tuple[int, list[Candidate]]:
    """Return ``(replace_from, candidates)`` for the text before *cursor*.

    Never raises; anything unexpected degrades to no candidates.
    """
    try:
        prefix = str(line or "")[: max(0, cursor)]
        try:
            tokens = tokenize(prefix)
        except ParseError:
            return 0, []
        offset = replace_offset(prefix)
        if not tokens:
            return offset, []
        command = tree.find(tokens[0])
        if command is None:
            return offset, [_node_candidate(node) for node in tree.matching(tokens[0])]
        deepest = find_deepest_match(command, tokens)[-1]
        if deepest.children:
            return offset, _subcommand_candidates(deepest, tokens[-1], ends_with_whitespace(prefix))
        return offset, _option_candidates(deepest, tokens, prefix)
    except Exception as exc:
        log_event("completion_failed", line=line, cursor=cursor, error=exc)
        return 0, []


class CommandCompleter(Completer):
    """prompt_toolkit adapter; silent while a server process is attached."""

    def __init__(self, state_provider: Callable[[], InterpreterState]) -> None:
        self._state_provider = state_provider

    def get_completions(self, document, complete_event):  # type: ignore[override]
        state = self._state_provider()
        if isinstance(state.context.current, AttachedProcess):
            return
        cursor = int(document.cursor_position)
        offset, candidates = complete(state.tree, document.text, cursor)
        for cand in candidates:
            yield Completion(
                cand.insert_text,
                start_position=offset - cursor,
                display=cand.insert_text,
                display_meta="" if cand.display_text == cand.insert_text else cand.display_text,
            )


__all__ = [
    "Candidate",
    "complete",
    "CommandCompleter",
]
