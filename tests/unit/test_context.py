"""Context switching between command dispatch and an attached server."""

from __future__ import annotations

import subprocess
import sys

from mcerv.shell import AttachedProcess, CommandTree, DefaultContext, execute_line
from mcerv.shell.context import ContextEngine
from mcerv.shell.interpreter import handle_interrupt
from mcerv.shell.output import OutputSink


class FakeStdin:
    """Child stdin that exits the fake server when it receives ``stop``."""

    def __init__(self, engine: ContextEngine) -> None:
        self.engine = engine
        self.written: list[str] = []
        self.flushes = 0

    def write(self, text: str) -> int:
        self.written.append(text)
        if text == "stop\n":
            self.engine.publish(DefaultContext())
        return len(text)

    def flush(self) -> None:
        self.flushes += 1


def test_attached_lines_are_forwarded_not_dispatched(sample_tree: CommandTree, recorder, make_state) -> None:
    state = make_state(sample_tree)
    stdin = FakeStdin(state.context)
    state.context.publish(AttachedProcess(stdin=stdin, name="srv"))

    assert execute_line(state, "cmd1 sub1") is None
    assert execute_line(state, "  say hi  ") is None
    assert stdin.written == ["cmd1 sub1\n", "  say hi  \n"]
    assert stdin.flushes == 2
    assert recorder.calls == []


def test_interrupt_while_attached_sends_stop(sample_tree: CommandTree, make_state, output: list[str]) -> None:
    state = make_state(sample_tree)
    stdin = FakeStdin(state.context)
    state.context.publish(AttachedProcess(stdin=stdin, name="srv"))

    assert handle_interrupt(state) == 0
    assert stdin.written == ["stop\n"]
    assert isinstance(state.context.current, DefaultContext)
    assert output[-1] == "Bye."


def test_context_reverts_after_detach(sample_tree: CommandTree, recorder, make_state) -> None:
    state = make_state(sample_tree)
    state.context.publish(AttachedProcess(stdin=FakeStdin(state.context), name="srv"))
    state.context.publish(DefaultContext())

    result = execute_line(state, "cmd1")
    assert result is not None and result.ok
    assert recorder.calls == [("cmd1", ["cmd1"])]


def test_attach_drains_real_child_and_shuts_it_down() -> None:
    lines: list[str] = []
    engine = ContextEngine(shutdown_timeout=30, terminate_grace=5)
    script = "import sys\nprint('ready', flush=True)\nprint('got ' + sys.stdin.readline().strip(), flush=True)\n"
    process = subprocess.Popen(
        [sys.executable, "-c", script],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
        bufsize=1,
    )
    with OutputSink(lines.append) as printer:
        engine.attach(process, printer, name="demo")
        assert engine.is_attached()
        assert engine.shutdown() is True
        printer.flush()
    assert lines == ["ready", "got stop", "Server demo exited with code 0."]
    assert not engine.is_attached()


def test_shutdown_terminates_unresponsive_child() -> None:
    engine = ContextEngine(shutdown_timeout=0.5, terminate_grace=5)
    process = subprocess.Popen(
        [sys.executable, "-c", "import time\ntime.sleep(60)\n"],
        stdin=subprocess.PIPE,
        stdout=subprocess.PIPE,
        stderr=subprocess.STDOUT,
        text=True,
    )
    with OutputSink(lambda text: None) as printer:
        engine.attach(process, printer, name="stuck")
        assert engine.shutdown() is False
    assert process.poll() is not None
    assert isinstance(engine.current, DefaultContext)
