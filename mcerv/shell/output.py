"""Serialized output: one consumer thread owns the terminal writer."""

from __future__ import annotations

import queue
import threading
from typing import Callable

from mcerv.utils.logging_utils import log_event

_STOP = object()


def _print_line(text: str) -> None:
    # Looked up at call time so prompt_toolkit's patch_stdout proxy is used.
    print(text, flush=True)


class OutputSink:
    """Queue-fed printer shared by handlers and background threads.

    Each ``emit`` is one atomic item: a multi-line block from one producer is
    never interleaved with another producer's output.  Order is preserved per
    producer only.
    """

    def __init__(self, writer: Callable[[str], None] | None = None, *, name: str = "mcerv-output") -> None:
        self._writer = writer or _print_line
        self._queue: queue.Queue = queue.Queue()
        self._name = name
        self._thread: threading.Thread | None = None
        self._start_lock = threading.Lock()
        self._closed = False

    def _ensure_started(self) -> None:
        if self._thread is not None:
            return
        with self._start_lock:
            if self._thread is None:
                thread = threading.Thread(target=self._drain, name=self._name, daemon=True)
                thread.start()
                self._thread = thread

    def _drain(self) -> None:
        while True:
            item = self._queue.get()
            try:
                if item is _STOP:
                    return
                self._writer(item)
            except Exception as exc:
                log_event("output_write_failed", error=exc)
            finally:
                self._queue.task_done()

    def emit(self, text: object = "") -> None:
        if self._closed:
            log_event("output_dropped", text=str(text))
            return
        self._ensure_started()
        self._queue.put(str(text))

    def flush(self) -> None:
        """Block until everything emitted so far has been written."""
        if self._thread is not None:
            self._queue.join()

    def close(self) -> None:
        if self._closed:
            return
        self._closed = True
        if self._thread is not None:
            self._queue.put(_STOP)
            self._thread.join()

    def __enter__(self) -> OutputSink:
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


__all__ = [
    "OutputSink",
]
