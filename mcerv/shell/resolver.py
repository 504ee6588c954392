"""Map a token list onto the command tree.

Execution only ever follows exact token matches; prefix guessing belongs to
the completion engine.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Sequence

from .command_tree import CommandNode, CommandTree, Handler
from .error_model import NoHandlerError, UnknownCommandError


@dataclass(frozen=True)
class Resolution:
    chain: tuple[CommandNode, ...]
    handler: Handler

    @property
    def node(self) -> CommandNode:
        return self.chain[-1]

    @property
    def path(self) -> str:
        return " ".join(node.name for node in self.chain)


def _value_positions(command: CommandNode, tokens: Sequence[str]) -> set[int]:
    flags = command.value_option_flags()
    if not flags:
        return set()
    return {idx + 1 for idx, tok in enumerate(tokens) if tok in flags}


def find_deepest_match(command: CommandNode, tokens: Sequence[str]) -> tuple[CommandNode, ...]:
    """Greedy walk from *command* (matched by ``tokens[0]``) down the tree.

    At each level a child matches a token anywhere after the token its
    parent matched, so options may sit between a command and its
    sub-command.  Tokens consumed as option values never match.  With
    several matching children the leftmost token wins.  There is no
    backtracking; the walk stops at the first level without a match.
    """
    skip = _value_positions(command, tokens)
    chain = [command]
    pos = 0
    while True:
        best: CommandNode | None = None
        best_pos = len(tokens)
        for child in chain[-1].children:
            for idx in range(pos + 1, best_pos):
                if idx not in skip and tokens[idx] == child.name:
                    best, best_pos = child, idx
                    break
        if best is None:
            return tuple(chain)
        chain.append(best)
        pos = best_pos


def resolve_handler(tree: CommandTree, tokens: Sequence[str]) -> Resolution:
    if not tokens:
        raise UnknownCommandError("")
    command = tree.find(tokens[0])
    if command is None:
        raise UnknownCommandError(tokens[0])
    chain = find_deepest_match(command, tokens)
    for node in reversed(chain):
        if node.handler is not None:
            return Resolution(chain=chain, handler=node.handler)
    deepest = chain[-1]
    raise NoHandlerError(
        " ".join(node.name for node in chain),
        tuple(child.name for child in deepest.children),
    )


__all__ = [
    "Resolution",
    "find_deepest_match",
    "resolve_handler",
]
