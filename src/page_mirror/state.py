from __future__ import annotations

import threading

from .urls import url_key


class VisitedSet:
    """Run-scoped record of every URL already dispatched for fetching.

    Membership is case-insensitive. ``claim`` is the only way in and is an
    atomic check-and-insert, so at most one caller ever wins a given URL.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._keys: set[str] = set()
        self._urls: list[str] = []

    def __contains__(self, url: object) -> bool:
        if not isinstance(url, str):
            return False
        # Unlocked read; only used as a cheap pre-check before claim().
        return url_key(url) in self._keys

    def __len__(self) -> int:
        with self._lock:
            return len(self._keys)

    def claim(self, url: str) -> bool:
        key = url_key(url)
        with self._lock:
            if key in self._keys:
                return False
            self._keys.add(key)
            self._urls.append(url)
            return True

    def urls(self) -> list[str]:
        with self._lock:
            return list(self._urls)


class WorkTracker:
    """Count outstanding tasks and let one thread wait for zero."""

    def __init__(self) -> None:
        self._cond = threading.Condition()
        self._pending = 0

    @property
    def pending(self) -> int:
        with self._cond:
            return self._pending

    def start(self) -> None:
        with self._cond:
            self._pending += 1

    def finish(self) -> None:
        with self._cond:
            if self._pending <= 0:
                raise RuntimeError("finish() called more often than start()")
            self._pending -= 1
            if self._pending == 0:
                self._cond.notify_all()

    def wait(self, timeout: float | None = None) -> bool:
        with self._cond:
            return self._cond.wait_for(lambda: self._pending == 0, timeout=timeout)
