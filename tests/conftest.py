from __future__ import annotations

import threading
import time
from pathlib import Path

import pytest

from page_mirror.http_client import HttpClient


class FakeResponse:
    def __init__(
        self,
        url: str,
        status_code: int = 200,
        content: bytes = b"",
        headers: dict[str, str] | None = None,
    ) -> None:
        self.url = url
        self.status_code = status_code
        self.content = content
        self.headers = headers or {}


class FakeSession:
    """Stand-in for requests.Session that serves canned bodies.

    ``pages`` maps URL -> bytes, (status, bytes), a prepared FakeResponse
    (e.g. one whose ``url`` differs, to model a redirect) or an exception
    instance.
    Unknown URLs answer 404. Tracks every call and the peak number of
    concurrent ``get`` calls.
    """

    def __init__(self, pages: dict[str, object], *, delay_s: float = 0.0) -> None:
        self.pages = pages
        self.delay_s = delay_s
        self.calls: list[str] = []
        self.in_flight = 0
        self.max_in_flight = 0
        self._lock = threading.Lock()

    def get(self, url: str, timeout: float | None = None) -> FakeResponse:
        with self._lock:
            self.calls.append(url)
            self.in_flight += 1
            self.max_in_flight = max(self.max_in_flight, self.in_flight)
        try:
            if self.delay_s:
                time.sleep(self.delay_s)
            entry = self.pages.get(url)
            if entry is None:
                return FakeResponse(url, 404, b"not found")
            if isinstance(entry, FakeResponse):
                return entry
            if isinstance(entry, Exception):
                raise entry
            if isinstance(entry, tuple):
                status, body = entry
                return FakeResponse(url, status, body)
            assert isinstance(entry, bytes)
            return FakeResponse(url, 200, entry)
        finally:
            with self._lock:
                self.in_flight -= 1


def make_http(session: FakeSession) -> HttpClient:
    return HttpClient(session, timeout_s=5, max_retries=0, backoff_base_s=0)  # type: ignore[arg-type]


@pytest.fixture
def out_dir(tmp_path: Path) -> Path:
    return tmp_path / "site"
