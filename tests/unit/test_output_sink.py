"""Serialized output from several producer threads."""

from __future__ import annotations

import threading

from mcerv.shell import OutputSink


def test_each_producer_keeps_its_order() -> None:
    written: list[str] = []
    sink = OutputSink(written.append)

    def _produce(tag: str) -> None:
        for i in range(200):
            sink.emit(f"{tag}{i}")

    threads = [threading.Thread(target=_produce, args=(tag,)) for tag in "ab"]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()
    sink.close()

    assert len(written) == 400
    for tag in "ab":
        assert [w for w in written if w.startswith(tag)] == [f"{tag}{i}" for i in range(200)]


def test_multi_line_items_are_atomic() -> None:
    written: list[str] = []
    with OutputSink(written.append) as sink:
        sink.emit("line 1\nline 2")
        sink.emit(42)
    assert written == ["line 1\nline 2", "42"]


def test_writer_failure_does_not_stop_the_sink() -> None:
    written: list[str] = []

    def _writer(text: str) -> None:
        if text == "bad":
            raise OSError("terminal gone")
        written.append(text)

    with OutputSink(_writer) as sink:
        sink.emit("bad")
        sink.emit("good")
    assert written == ["good"]


def test_emit_after_close_is_dropped() -> None:
    written: list[str] = []
    sink = OutputSink(written.append)
    sink.emit("first")
    sink.close()
    sink.emit("late")
    assert written == ["first"]
