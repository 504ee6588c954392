"""Dispatch results and the per-line policy of the interpreter."""

from __future__ import annotations

from mcerv.shell import CommandNode, CommandTree, execute_line, run_repl
from mcerv.shell.dispatcher import dispatch
from mcerv.shell.error_model import (
    HANDLER_ERROR,
    NO_HANDLER,
    PARSE_ERROR,
    UNEXPECTED_ERROR,
    UNKNOWN_COMMAND,
    HandlerError,
    format_error,
)


def test_dispatch_runs_handler_with_all_tokens(sample_tree: CommandTree, recorder, make_state) -> None:
    state = make_state(sample_tree)
    result = dispatch(state, "cmd1 sub2 --name 'a b'")
    assert result.ok
    assert result.command == "cmd1 sub2"
    assert recorder.calls == [("sub2", ["cmd1", "sub2", "--name", "a b"])]


def test_blank_line_is_a_no_op(sample_tree: CommandTree, recorder, make_state) -> None:
    state = make_state(sample_tree)
    assert dispatch(state, "   ").ok
    assert recorder.calls == []


def test_error_codes(sample_tree: CommandTree, make_state) -> None:
    state = make_state(sample_tree)
    assert dispatch(state, 'cmd1 "open').error_code == PARSE_ERROR
    assert dispatch(state, "nope").error_code == UNKNOWN_COMMAND
    assert dispatch(state, "cmd2").error_code == NO_HANDLER


def test_handler_error_is_reported_and_state_kept(make_state) -> None:
    def _fail(state, tokens: list[str]) -> None:
        raise HandlerError("No server selected.")

    state = make_state(CommandTree([CommandNode(name="info", handler=_fail)]))
    result = dispatch(state, "info")
    assert not result.ok
    assert result.error_code == HANDLER_ERROR
    assert result.render() == "ERR: No server selected."


def test_unexpected_exception_is_not_fatal(make_state, output: list[str]) -> None:
    def _boom(state, tokens: list[str]) -> None:
        raise ZeroDivisionError("division by zero")

    state = make_state(CommandTree([CommandNode(name="boom", handler=_boom)]))
    result = execute_line(state, "boom")
    state.printer.flush()
    assert result is not None and result.error_code == UNEXPECTED_ERROR
    assert output == ["ERR: ZeroDivisionError: division by zero"]


def test_format_error_prefixes_once() -> None:
    assert format_error("oops") == "ERR: oops"
    assert format_error("ERR: oops") == "ERR: oops"
    assert format_error("", code="parse_error") == "ERR: parse_error"


def test_repl_stops_on_exit_and_continues_after_errors(make_state, output: list[str]) -> None:
    def _exit(state, tokens: list[str]) -> None:
        state.exit_requested = True

    state = make_state(CommandTree([CommandNode(name="exit", handler=_exit)]))
    lines = iter(["nope", "", "exit", "never read"])
    assert run_repl(state, lambda: next(lines)) == 0
    assert output == ["ERR: Unknown command: nope"]
    assert next(lines) == "never read"


def test_repl_treats_eof_as_interrupt(sample_tree: CommandTree, make_state, output: list[str]) -> None:
    def _read() -> str:
        raise EOFError

    state = make_state(sample_tree)
    assert run_repl(state, _read) == 0
    assert output == ["Bye."]
