"""HTTP client for the remote metadata services.

Thin wrapper over a ``requests.Session`` with retry on rate limits and
transient server errors.  Async variants run the blocking call in a worker
thread so the async runner can fan several requests out at once.
"""

from __future__ import annotations

import asyncio
import time
from pathlib import Path
from typing import Any

import requests
from tqdm import tqdm

from mcerv.config import (
    HTTP_CHUNK_SIZE,
    HTTP_RETRIES,
    HTTP_RETRY_BACKOFF,
    HTTP_TIMEOUT,
    USER_AGENT,
)
from mcerv.utils.logging_utils import log_event

_RETRY_STATUSES = frozenset({429, 500, 502, 503, 504})


class HttpError(RuntimeError):
    def __init__(self, message: str, *, status: int | None = None, url: str = "") -> None:
        super().__init__(message)
        self.status = status
        self.url = url


class HttpClient:
    def __init__(
        self,
        *,
        session: requests.Session | None = None,
        timeout: int = HTTP_TIMEOUT,
        retries: int = HTTP_RETRIES,
        backoff: float = HTTP_RETRY_BACKOFF,
        user_agent: str = USER_AGENT,
    ) -> None:
        self.session = session or requests.Session()
        self.session.headers.setdefault("User-Agent", user_agent)
        self.timeout = timeout
        self.retries = max(1, int(retries))
        self.backoff = backoff

    def _request(self, method: str, url: str, **kwargs: Any) -> requests.Response:
        """Send a request, retrying 429/5xx responses and connection failures."""
        kwargs.setdefault("timeout", self.timeout)
        last_exc: Exception | None = None
        for attempt in range(1, self.retries + 1):
            try:
                resp = self.session.request(method, url, **kwargs)
            except (requests.ConnectionError, requests.Timeout) as exc:
                last_exc = exc
                if attempt < self.retries:
                    log_event("http_retry", url=url, attempt=attempt, error=exc)
                    time.sleep(self.backoff * attempt)
                    continue
                break
            if resp.status_code in _RETRY_STATUSES and attempt < self.retries:
                wait_time = self.backoff * attempt * 2
                log_event("http_retry", url=url, attempt=attempt, http_status=resp.status_code, wait_time_sec=wait_time)
                resp.close()
                time.sleep(wait_time)
                continue
            if resp.status_code >= 400:
                body = resp.text[:500] if not kwargs.get("stream") else ""
                resp.close()
                raise HttpError(f"HTTP {resp.status_code} from {url}: {body}".strip(), status=resp.status_code, url=url)
            return resp
        raise HttpError(f"request to {url} failed: {last_exc}", url=url) from last_exc

    def get_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        resp = self._request("GET", url, params=params)
        try:
            return resp.json()
        except ValueError as exc:
            raise HttpError(f"invalid JSON from {url}", status=resp.status_code, url=url) from exc

    def post_json(self, url: str, payload: Any) -> Any:
        resp = self._request("POST", url, json=payload)
        try:
            return resp.json()
        except ValueError as exc:
            raise HttpError(f"invalid JSON from {url}", status=resp.status_code, url=url) from exc

    def download(self, url: str, save_path: Path, *, show_progress: bool = False) -> Path:
        """Stream *url* into *save_path*; a partial file is removed on failure."""
        save_path.parent.mkdir(parents=True, exist_ok=True)
        tmp_path = save_path.with_name(save_path.name + ".part")
        try:
            with self._request("GET", url, stream=True) as resp:
                total = int(resp.headers.get("Content-Length") or 0) or None
                with tmp_path.open("wb") as fh, tqdm(
                    total=total,
                    desc=save_path.name,
                    unit="B",
                    unit_scale=True,
                    disable=not show_progress,
                    leave=False,
                ) as progress:
                    for chunk in resp.iter_content(chunk_size=HTTP_CHUNK_SIZE):
                        if chunk:
                            fh.write(chunk)
                            progress.update(len(chunk))
            tmp_path.replace(save_path)
        except (requests.RequestException, OSError, HttpError) as exc:
            tmp_path.unlink(missing_ok=True)
            if isinstance(exc, HttpError):
                raise
            raise HttpError(f"download of {url} failed: {exc}", url=url) from exc
        return save_path

    # ------------------------------------------------------------------
    # Async variants
    # ------------------------------------------------------------------
    async def aget_json(self, url: str, *, params: dict[str, Any] | None = None) -> Any:
        return await asyncio.to_thread(self.get_json, url, params=params)

    async def apost_json(self, url: str, payload: Any) -> Any:
        return await asyncio.to_thread(self.post_json, url, payload)

    async def adownload(self, url: str, save_path: Path, *, show_progress: bool = False) -> Path:
        return await asyncio.to_thread(self.download, url, save_path, show_progress=show_progress)

    def close(self) -> None:
        self.session.close()


__all__ = [
    "HttpError",
    "HttpClient",
]
