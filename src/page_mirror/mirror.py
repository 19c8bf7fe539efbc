from __future__ import annotations

import logging
import threading
from collections import Counter
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Iterable

from bs4 import BeautifulSoup

from .errors import InvalidRootUrlError, RootFetchError
from .extract import (
    document_base_url,
    extract_markup_references,
    extract_stylesheet_references,
)
from .fetcher import Fetcher, is_stylesheet_path
from .http_client import DEFAULT_USER_AGENT, HttpClient
from .manifest import ManifestWriter, utc_iso
from .paths import INDEX_FILENAME, map_to_local_path
from .state import VisitedSet, WorkTracker
from .urls import is_absolute_http_url, normalize_url, resolve_url

logger = logging.getLogger(__name__)

DEFAULT_MAX_CONCURRENCY = 5

_ROOT_PATH = Path(INDEX_FILENAME)

_STAT_FOR_EVENT = {
    "fetched": "fetched",
    "http_error": "skipped",
    "reserved_path": "skipped",
    "error": "error",
}


@dataclass
class MirrorConfig:
    out_dir: Path
    max_concurrency: int = DEFAULT_MAX_CONCURRENCY
    timeout_s: float = 30
    max_retries: int = 2
    backoff_base_s: float = 1.0
    user_agent: str = DEFAULT_USER_AGENT
    write_manifest: bool = False
    # Resolve stylesheet references against the page URL instead of the
    # stylesheet's own URL.
    anchor_css_to_root: bool = False

    def __post_init__(self) -> None:
        if self.max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        if self.max_retries < 0:
            raise ValueError("max_retries must be >= 0")


@dataclass
class MirrorSummary:
    root_url: str
    out_dir: Path
    started_at: str
    finished_at: str
    visited: int
    stats: dict[str, int] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {
            "root_url": self.root_url,
            "out_dir": str(self.out_dir),
            "started_at": self.started_at,
            "finished_at": self.finished_at,
            "visited": self.visited,
            "stats": dict(self.stats),
        }


class Mirror:
    """Mirror one page and everything it references into ``config.out_dir``.

    Every distinct URL (case-insensitively) is fetched at most once, no more
    than ``max_concurrency`` fetches are in flight at any time, and
    ``run`` returns only after every stylesheet discovered along the way has
    been followed to exhaustion.
    """

    def __init__(self, *, http: HttpClient, config: MirrorConfig) -> None:
        self.http = http
        self.cfg = config
        self.out_dir = self.cfg.out_dir

        self.visited = VisitedSet()
        self.root_url: str | None = None
        self._root_anchor: str | None = None
        self._gate = threading.BoundedSemaphore(self.cfg.max_concurrency)
        self._tracker = WorkTracker()
        self._stats: Counter[str] = Counter()
        self._stats_lock = threading.Lock()
        self._pool: ThreadPoolExecutor | None = None
        self._manifest: ManifestWriter | None = None
        self._fetcher = Fetcher(self.http, self.out_dir, on_event=self._record)

    def _count(self, key: str) -> None:
        with self._stats_lock:
            self._stats[key] += 1

    def _record(self, event: dict[str, Any]) -> None:
        stat = _STAT_FOR_EVENT.get(str(event.get("kind")))
        if stat is not None:
            self._count(stat)
        if self._manifest is not None:
            self._manifest.append(event)

    def run(self, root_url: str) -> MirrorSummary:
        root_url = (root_url or "").strip()
        if not is_absolute_http_url(root_url):
            raise InvalidRootUrlError(root_url)
        root_url = normalize_url(root_url)
        self.root_url = root_url
        started_at = utc_iso()

        self.out_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Saving files to folder '%s'", self.out_dir)
        if self.cfg.write_manifest:
            self._manifest = ManifestWriter(self.out_dir)

        # The page itself always lands in index.html, which stays reserved
        # for the rest of the run (see process_resource).
        self.visited.claim(root_url)
        html, final_root = self._fetcher.fetch_document(root_url, _ROOT_PATH)
        if html is None:
            raise RootFetchError(root_url)
        self._root_anchor = final_root

        soup = BeautifulSoup(html, "html.parser")
        base_url = document_base_url(soup, final_root)

        # Extra workers let stylesheet parsing and dedup checks proceed while
        # all fetch slots are taken.
        workers = self.cfg.max_concurrency * 2
        with ThreadPoolExecutor(
            max_workers=workers, thread_name_prefix="page-mirror"
        ) as pool:
            self._pool = pool
            try:
                self._schedule_all(extract_markup_references(soup), base_url)
                self._tracker.wait()
            finally:
                self._pool = None

        summary = MirrorSummary(
            root_url=root_url,
            out_dir=self.out_dir,
            started_at=started_at,
            finished_at=utc_iso(),
            visited=len(self.visited),
            stats=dict(self._stats),
        )
        if self._manifest is not None:
            self._manifest.write_summary(summary.to_dict())
        return summary

    def _schedule_all(self, refs: Iterable[str], anchor: str) -> None:
        for ref in sorted(refs):
            url = resolve_url(anchor, ref)
            if url is None:
                logger.warning("Skipping unresolvable reference %r", ref)
                self._count("unresolved")
                continue
            self._schedule(url)

    def _schedule(self, url: str) -> None:
        if self._pool is None:
            raise RuntimeError("Mirror is not running")
        self._tracker.start()
        try:
            self._pool.submit(self._run_task, url)
        except RuntimeError:
            self._tracker.finish()
            raise

    def _run_task(self, url: str) -> None:
        try:
            self.process_resource(url)
        except Exception:  # noqa: BLE001
            logger.exception("Unexpected error processing %s", url)
            self._count("error")
        finally:
            self._tracker.finish()

    def process_resource(self, url: str) -> None:
        """Fetch ``url`` once and schedule whatever its stylesheet references."""

        if url in self.visited:
            return

        with self._gate:
            # Re-check under the slot: two tasks may pass the pre-check for
            # the same URL.
            if not self.visited.claim(url):
                return
            local_path = map_to_local_path(url)
            if local_path == _ROOT_PATH:
                logger.warning(
                    "Skipping %s: %s is reserved for the mirrored page",
                    url,
                    INDEX_FILENAME,
                )
                self._record({"kind": "reserved_path", "url": url})
                return
            content, final_url = self._fetcher.fetch_document(url, local_path)

        if content is None or not is_stylesheet_path(local_path):
            return

        anchor = final_url
        if self.cfg.anchor_css_to_root and self._root_anchor is not None:
            anchor = self._root_anchor
        self._schedule_all(extract_stylesheet_references(content), anchor)
