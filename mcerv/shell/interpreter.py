"""Per-line policy and the interactive read loop.

Every line first drains pending context changes.  While a server process is
attached the line goes to the child verbatim; otherwise it is dispatched as
a command.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Callable

from mcerv.utils.logging_utils import log_event

from .context import AttachedProcess
from .dispatcher import DispatchResult, dispatch

if TYPE_CHECKING:
    from .state import InterpreterState


def handle_line(state: InterpreterState, line: str) -> DispatchResult | None:
    """Forward or dispatch *line*; returns None when it went to the child."""
    context = state.context.poll()
    if isinstance(context, AttachedProcess):
        try:
            state.context.forward(line)
        except (OSError, ValueError) as exc:
            log_event("server_input_failed", name=context.name, error=exc)
            state.echo(f"Failed to write to server: {exc}")
        return None
    result = dispatch(state, line)
    if not result.ok:
        state.echo(result.render())
    return result


def handle_interrupt(state: InterpreterState) -> int:
    """Ctrl-C / Ctrl-D at the prompt: stop an attached server, then exit."""
    context = state.context.poll()
    if isinstance(context, AttachedProcess):
        state.echo(f"Sending '{state.context.shutdown_command}' to the server, waiting for it to exit...")
        if not state.context.shutdown():
            state.echo("Server did not stop in time and was terminated.")
    state.echo("Bye.")
    state.printer.flush()
    return 0


def run_repl(state: InterpreterState, read_line: Callable[[], str]) -> int:
    while not state.exit_requested:
        try:
            line = read_line()
        except (EOFError, KeyboardInterrupt):
            return handle_interrupt(state)
        try:
            handle_line(state, line)
        except KeyboardInterrupt:
            state.echo("Interrupted.")
    state.printer.flush()
    return 0


__all__ = [
    "handle_line",
    "handle_interrupt",
    "run_repl",
]
