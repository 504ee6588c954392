"""Synchronous facade over a background asyncio event loop.

Handlers are plain functions.  When they need network I/O they hand a
coroutine to ``AsyncRunner.block_on`` and wait for the result, so at most one
command is ever in flight while the coroutine itself may fan out.
"""

from __future__ import annotations

import asyncio
import threading
from typing import Any, Coroutine, TypeVar

T = TypeVar("T")


class AsyncRunner:
    def __init__(self, *, name: str = "mcerv-async") -> None:
        self._name = name
        self._loop: asyncio.AbstractEventLoop | None = None
        self._thread: threading.Thread | None = None
        self._lock = threading.Lock()

    def _ensure_loop(self) -> asyncio.AbstractEventLoop:
        with self._lock:
            if self._loop is None:
                loop = asyncio.new_event_loop()
                thread = threading.Thread(target=loop.run_forever, name=self._name, daemon=True)
                thread.start()
                self._loop, self._thread = loop, thread
            return self._loop

    def block_on(self, coro: Coroutine[Any, Any, T], *, timeout: float | None = None) -> T:
        """Run *coro* on the background loop and wait for its result.

        Exceptions raised by the coroutine propagate to the caller.
        """
        loop = self._ensure_loop()
        if threading.current_thread() is self._thread:
            coro.close()
            raise RuntimeError("block_on() called from the runner's own loop")
        future = asyncio.run_coroutine_threadsafe(coro, loop)
        return future.result(timeout)

    def close(self) -> None:
        with self._lock:
            loop, thread = self._loop, self._thread
            self._loop = self._thread = None
        if loop is None:
            return
        loop.call_soon_threadsafe(loop.stop)
        if thread is not None:
            thread.join()
        loop.close()


__all__ = [
    "AsyncRunner",
]
