from __future__ import annotations

import json
import threading
import time
import uuid
from collections import Counter
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any


def utc_iso() -> str:
    return time.strftime("%Y-%m-%dT%H:%M:%SZ", time.gmtime())


@dataclass
class ManifestWriter:
    """Record one mirroring run inside its output folder.

    Every fetch outcome becomes one line of ``manifest.jsonl`` tagged with the
    run id; ``write_summary`` stores the run totals plus a per-kind event
    count in ``manifest.json``. Safe to call from worker threads.
    """

    out_dir: Path
    run_id: str = field(default_factory=lambda: uuid.uuid4().hex)
    _lock: threading.Lock = field(
        default_factory=threading.Lock, init=False, repr=False
    )
    _kinds: Counter[str] = field(default_factory=Counter, init=False, repr=False)

    def __post_init__(self) -> None:
        self.jsonl_path = self.out_dir / "manifest.jsonl"
        self.json_path = self.out_dir / "manifest.json"

    def append(self, event: dict[str, Any]) -> None:
        event = dict(event)
        event.setdefault("at", utc_iso())
        event["run_id"] = self.run_id
        line = json.dumps(event, ensure_ascii=False) + "\n"
        with self._lock:
            self._kinds[str(event.get("kind"))] += 1
            self.jsonl_path.parent.mkdir(parents=True, exist_ok=True)
            with self.jsonl_path.open("a", encoding="utf-8", newline="\n") as f:
                f.write(line)

    def saved_paths(self) -> list[str]:
        """Local paths (posix) of every resource written so far, in order."""
        if not self.jsonl_path.exists():
            return []
        out: list[str] = []
        with self._lock:
            lines = self.jsonl_path.read_text(encoding="utf-8").splitlines()
        for line in lines:
            evt = json.loads(line)
            if evt.get("run_id") == self.run_id and evt.get("kind") == "fetched":
                out.append(str(evt.get("path")))
        return out

    def write_summary(self, summary: dict[str, Any]) -> None:
        with self._lock:
            kinds = dict(self._kinds)
        payload = dict(summary)
        payload["run_id"] = self.run_id
        payload["events"] = kinds
        payload["files"] = self.saved_paths()
        self.json_path.write_text(
            json.dumps(payload, indent=2, ensure_ascii=False), encoding="utf-8"
        )
