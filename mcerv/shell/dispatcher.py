"""Tokenize, resolve and run one command line."""

from __future__ import annotations

import time
import traceback
from dataclasses import dataclass
from typing import TYPE_CHECKING

from mcerv.utils.logging_utils import log_event

from .error_model import UNEXPECTED_ERROR, DispatchError, HandlerError, ParseError, format_error
from .resolver import resolve_handler
from .tokenizer import tokenize

if TYPE_CHECKING:
    from .state import InterpreterState


@dataclass(frozen=True)
class DispatchResult:
    ok: bool
    message: str = ""
    error_code: str | None = None
    command: str = ""

    def render(self) -> str:
        return "" if self.ok else format_error(self.message, code=self.error_code or "error")


def _dispatch_error(message: str, *, code: str, command: str = "") -> DispatchResult:
    return DispatchResult(ok=False, message=message, error_code=code, command=command)


def dispatch(state: InterpreterState, line: str) -> DispatchResult:
    """Run *line* as a command; every user-caused failure becomes a result."""
    text = str(line or "").strip()
    if not text:
        return DispatchResult(ok=True)
    try:
        tokens = tokenize(text)
    except ParseError as exc:
        return _dispatch_error(exc.message, code=exc.code)
    if not tokens:
        return DispatchResult(ok=True)
    try:
        resolution = resolve_handler(state.tree, tokens)
    except DispatchError as exc:
        return _dispatch_error(exc.message, code=exc.code)

    started = time.perf_counter()
    try:
        resolution.handler(state, tokens)
    except HandlerError as exc:
        log_event("command_failed", command=resolution.path, tokens=tokens, error_code=exc.code, error=exc.message)
        return _dispatch_error(exc.message, code=exc.code, command=resolution.path)
    except Exception as exc:
        log_event(
            "command_failed",
            command=resolution.path,
            tokens=tokens,
            error_code=UNEXPECTED_ERROR,
            error=exc,
            traceback=traceback.format_exc(),
        )
        if state.debug:
            state.echo(traceback.format_exc().rstrip())
        return _dispatch_error(f"{type(exc).__name__}: {exc}", code=UNEXPECTED_ERROR, command=resolution.path)
    log_event(
        "command_dispatched",
        command=resolution.path,
        tokens=tokens,
        elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
    )
    return DispatchResult(ok=True, command=resolution.path)


__all__ = [
    "DispatchResult",
    "dispatch",
]
