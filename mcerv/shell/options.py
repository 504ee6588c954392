"""Option lookups over a handler's raw token list.

Options are always typed ``--name``.  Flags are presence-only; a value option
takes the following token, and a following token starting with ``--`` (or no
token at all) means the value is missing.
"""

from __future__ import annotations

from typing import Sequence

from .error_model import OptionValueError


def has_flag(tokens: Sequence[str], name: str) -> bool:
    return f"--{name}" in tokens


def option_value(tokens: Sequence[str], name: str) -> str | None:
    """Value following ``--name``; None when the option is absent."""
    flag = f"--{name}"
    try:
        idx = list(tokens).index(flag)
    except ValueError:
        return None
    if idx + 1 >= len(tokens) or tokens[idx + 1].startswith("--"):
        raise OptionValueError(name)
    return tokens[idx + 1]


def positional(tokens: Sequence[str], index: int) -> str | None:
    """``tokens[index]`` unless it is missing or looks like an option."""
    if index < len(tokens) and not tokens[index].startswith("-"):
        return tokens[index]
    return None


__all__ = [
    "has_flag",
    "option_value",
    "positional",
]
