"""Shell-style splitting of one input line into tokens."""

from __future__ import annotations

import re
import shlex
from typing import Iterable

from .error_model import ParseError

_LAST_WORD_RE = re.compile(r"\S*\Z")


def tokenize(line: str) -> list[str]:
    """Split *line* the way a POSIX shell would.

    Quotes group whitespace and a backslash escapes the next character
    (outside single quotes).  Raises ``ParseError`` for an unterminated
    quote or a trailing backslash.
    """
    try:
        return shlex.split(str(line or ""), posix=True)
    except ValueError as exc:
        text = str(exc).lower()
        if "escaped" in text:
            raise ParseError(ParseError.DANGLING_ESCAPE) from exc
        raise ParseError(ParseError.UNTERMINATED_QUOTE) from exc


def join(tokens: Iterable[str]) -> str:
    """Inverse of ``tokenize``: quote whatever needs quoting."""
    return shlex.join(str(tok) for tok in tokens)


def replace_offset(prefix: str) -> int:
    """Index just after the last whitespace character of *prefix* (0 if none)."""
    match = _LAST_WORD_RE.search(prefix)
    return match.start() if match else len(prefix)


def ends_with_whitespace(prefix: str) -> bool:
    return bool(prefix) and prefix[-1].isspace()


__all__ = [
    "tokenize",
    "join",
    "replace_offset",
    "ends_with_whitespace",
]
