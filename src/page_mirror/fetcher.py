from __future__ import annotations

import logging
from pathlib import Path
from typing import Any, Callable

import requests

from .errors import TransportError
from .http_client import HttpClient

logger = logging.getLogger(__name__)

TEXT_SUFFIXES = {".html", ".htm", ".css", ".js"}

FetchEventHook = Callable[[dict[str, Any]], None]


def is_text_path(local_path: Path) -> bool:
    return local_path.suffix.lower() in TEXT_SUFFIXES


def is_stylesheet_path(local_path: Path) -> bool:
    return local_path.suffix.lower() == ".css"


class Fetcher:
    """Download one URL into the output folder.

    ``fetch`` never raises for per-resource problems: HTTP errors, transport
    failures and disk errors are logged and reported as ``None``.
    """

    def __init__(
        self,
        http: HttpClient,
        out_dir: Path,
        *,
        on_event: FetchEventHook | None = None,
    ) -> None:
        self.http = http
        self.out_dir = out_dir
        self._on_event = on_event

    def _emit(self, event: dict[str, Any]) -> None:
        if self._on_event is not None:
            self._on_event(event)

    def fetch(self, url: str, local_path: Path) -> str | None:
        text, _ = self.fetch_document(url, local_path)
        return text

    def fetch_document(self, url: str, local_path: Path) -> tuple[str | None, str]:
        """Like ``fetch``, but also return the URL the content came from.

        After redirects that is the anchor for references inside the
        document; on failure it is ``url`` itself.
        """

        logger.info("Downloading: %s", url)
        try:
            res = self.http.get(url)
        except (TransportError, requests.RequestException) as e:
            logger.warning("Error downloading %s: %s", url, e)
            self._emit({"kind": "error", "url": url, "error": str(e)})
            return None, url

        if not res.ok:
            logger.warning("HTTP error %s for %s", res.status_code, url)
            self._emit(
                {"kind": "http_error", "url": url, "status_code": res.status_code}
            )
            return None, url

        full_path = self.out_dir / local_path
        try:
            full_path.parent.mkdir(parents=True, exist_ok=True)
            full_path.write_bytes(res.body)
        except OSError as e:
            logger.warning("Error saving %s to %s: %s", url, full_path, e)
            self._emit({"kind": "error", "url": url, "error": str(e)})
            return None, url

        final_url = res.final_url or url
        self._emit(
            {
                "kind": "fetched",
                "url": url,
                "final_url": final_url,
                "status_code": res.status_code,
                "content_type": res.headers.get("Content-Type"),
                "size_bytes": len(res.body),
                "path": local_path.as_posix(),
            }
        )

        if not is_text_path(local_path):
            return None, final_url
        return res.body.decode("utf-8", errors="replace"), final_url
