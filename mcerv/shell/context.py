"""Runtime context: interpret lines as commands, or pipe them to a child.

``DefaultContext`` is the initial state.  A handler that launches a server
publishes ``AttachedProcess`` on the side channel; the reader thread that
drains the child's stdout publishes ``DefaultContext`` again once it hits
EOF.  The interactive loop calls ``poll()`` once per line.
"""

from __future__ import annotations

import queue
import subprocess
import threading
from dataclasses import dataclass, field
from typing import IO, TYPE_CHECKING, Union

from mcerv.config import SERVER_SHUTDOWN_COMMAND, SERVER_SHUTDOWN_TIMEOUT, SERVER_TERMINATE_GRACE
from mcerv.utils.logging_utils import log_event

if TYPE_CHECKING:
    from .output import OutputSink


@dataclass(frozen=True)
class DefaultContext:
    pass


@dataclass(frozen=True)
class AttachedProcess:
    stdin: IO[str] = field(compare=False)
    process: subprocess.Popen | None = field(default=None, compare=False)
    name: str = ""


Context = Union[DefaultContext, AttachedProcess]
DEFAULT_CONTEXT = DefaultContext()


class ContextEngine:
    def __init__(
        self,
        *,
        shutdown_command: str = SERVER_SHUTDOWN_COMMAND,
        shutdown_timeout: float = SERVER_SHUTDOWN_TIMEOUT,
        terminate_grace: float = SERVER_TERMINATE_GRACE,
    ) -> None:
        self.shutdown_command = shutdown_command
        self.shutdown_timeout = shutdown_timeout
        self.terminate_grace = terminate_grace
        self._current: Context = DEFAULT_CONTEXT
        self._channel: queue.SimpleQueue[Context] = queue.SimpleQueue()
        self._detached = threading.Event()
        self._detached.set()

    # ------------------------------------------------------------------
    # Side channel
    # ------------------------------------------------------------------
    def publish(self, context: Context) -> None:
        """Queue a context change; safe from any thread."""
        if isinstance(context, AttachedProcess):
            self._detached.clear()
        self._channel.put(context)
        if isinstance(context, DefaultContext):
            self._detached.set()

    def poll(self) -> Context:
        """Apply every pending change without blocking and return the result."""
        while True:
            try:
                context = self._channel.get_nowait()
            except queue.Empty:
                return self._current
            previous, self._current = self._current, context
            if isinstance(context, AttachedProcess) and not isinstance(previous, AttachedProcess):
                log_event("context_attached", name=context.name)
            elif isinstance(context, DefaultContext) and isinstance(previous, AttachedProcess):
                log_event("context_detached", name=previous.name)

    @property
    def current(self) -> Context:
        return self._current

    def is_attached(self) -> bool:
        return isinstance(self.poll(), AttachedProcess)

    # ------------------------------------------------------------------
    # Attached process I/O
    # ------------------------------------------------------------------
    def forward(self, line: str) -> None:
        """Write *line* verbatim plus newline to the attached child's stdin."""
        context = self._current
        if not isinstance(context, AttachedProcess):
            raise RuntimeError("no process attached")
        context.stdin.write(f"{line}\n")
        context.stdin.flush()

    def attach(self, process: subprocess.Popen, printer: OutputSink, *, name: str = "") -> threading.Thread:
        """Publish *process* as attached and start draining its stdout."""
        self.publish(AttachedProcess(stdin=process.stdin, process=process, name=name))
        reader = threading.Thread(
            target=self._drain_stdout,
            args=(process, printer, name),
            name=f"mcerv-server-{name or process.pid}",
            daemon=True,
        )
        reader.start()
        return reader

    def _drain_stdout(self, process: subprocess.Popen, printer: OutputSink, name: str) -> None:
        try:
            for raw in process.stdout:
                printer.emit(raw.rstrip("\r\n"))
        finally:
            returncode = process.wait()
            label = f"Server {name}" if name else "Server"
            printer.emit(f"{label} exited with code {returncode}.")
            self.publish(DEFAULT_CONTEXT)

    def shutdown(self) -> bool:
        """Ask the attached server to stop and block until it is gone.

        Returns True when the server exited on its own, False when it had to
        be terminated after ``shutdown_timeout`` seconds.
        """
        context = self.poll()
        if not isinstance(context, AttachedProcess):
            return True
        try:
            self.forward(self.shutdown_command)
        except (OSError, ValueError) as exc:
            log_event("server_shutdown_write_failed", name=context.name, error=exc)
        timeout = self.shutdown_timeout if self.shutdown_timeout > 0 else None
        finished = self._detached.wait(timeout)
        if not finished:
            log_event("server_shutdown_timeout", name=context.name, timeout=self.shutdown_timeout)
            if context.process is not None:
                context.process.terminate()
                try:
                    context.process.wait(self.terminate_grace)
                except subprocess.TimeoutExpired:
                    context.process.kill()
                    context.process.wait()
            if not self._detached.wait(self.terminate_grace):
                self.publish(DEFAULT_CONTEXT)
        self.poll()
        return finished


__all__ = [
    "DefaultContext",
    "AttachedProcess",
    "Context",
    "DEFAULT_CONTEXT",
    "ContextEngine",
]
