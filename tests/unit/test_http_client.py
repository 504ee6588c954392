"""Retry and download behaviour of the HTTP client."""

from __future__ import annotations

from pathlib import Path

import pytest
import requests

from mcerv.services.http import HttpClient, HttpError


class FakeResponse:
    def __init__(self, status: int, payload=None, chunks: tuple[bytes, ...] = ()) -> None:
        self.status_code = status
        self._payload = payload
        self._chunks = chunks
        self.headers = {"Content-Length": str(sum(len(c) for c in chunks))}
        self.text = "" if payload is None else str(payload)

    def json(self):
        if self._payload is None:
            raise ValueError("no json")
        return self._payload

    def iter_content(self, chunk_size: int = 1):
        yield from self._chunks

    def close(self) -> None:
        pass

    def __enter__(self):
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


class FakeSession:
    def __init__(self, responses: list) -> None:
        self.responses = list(responses)
        self.headers: dict[str, str] = {}
        self.calls: list[tuple[str, str]] = []

    def request(self, method: str, url: str, **kwargs):
        self.calls.append((method, url))
        item = self.responses.pop(0)
        if isinstance(item, Exception):
            raise item
        return item

    def close(self) -> None:
        pass


def _client(responses: list, retries: int = 3) -> tuple[HttpClient, FakeSession]:
    session = FakeSession(responses)
    return HttpClient(session=session, retries=retries, backoff=0), session


def test_retries_rate_limit_then_succeeds() -> None:
    client, session = _client([FakeResponse(429), FakeResponse(503), FakeResponse(200, {"ok": True})])
    assert client.get_json("https://example.invalid/x") == {"ok": True}
    assert len(session.calls) == 3
    assert session.headers["User-Agent"].startswith("mcerv/")


def test_client_errors_are_not_retried() -> None:
    client, session = _client([FakeResponse(404, "missing")])
    with pytest.raises(HttpError) as info:
        client.get_json("https://example.invalid/x")
    assert info.value.status == 404
    assert len(session.calls) == 1


def test_connection_errors_exhaust_retries() -> None:
    client, session = _client([requests.ConnectionError("down")] * 2, retries=2)
    with pytest.raises(HttpError):
        client.post_json("https://example.invalid/x", {"a": 1})
    assert len(session.calls) == 2


def test_download_writes_file_and_cleans_up_on_failure(tmp_path: Path) -> None:
    client, _ = _client([FakeResponse(200, chunks=(b"ab", b"cd")), FakeResponse(500)], retries=1)
    target = tmp_path / "nested" / "server.jar"
    assert client.download("https://example.invalid/jar", target) == target
    assert target.read_bytes() == b"abcd"

    failed = tmp_path / "other.jar"
    with pytest.raises(HttpError):
        client.download("https://example.invalid/jar", failed)
    assert not failed.exists()
    assert not failed.with_name("other.jar.part").exists()
