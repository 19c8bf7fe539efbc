from __future__ import annotations

import hashlib
import re
from pathlib import Path
from urllib.parse import unquote, urlparse

from .errors import OutputFolderError

_INVALID_FILENAME_CHARS = re.compile(r"[?*|<>:\"\x00-\x1F]")
_SEPARATORS = re.compile(r"[/\\]")

INDEX_FILENAME = "index.html"
FALLBACK_DIR = "others"


def _fallback_path(url: str) -> Path:
    digest = hashlib.sha256(url.encode("utf-8", errors="replace")).hexdigest()[:12]
    return Path(FALLBACK_DIR) / f"{digest}.dat"


def map_to_local_path(url: str) -> Path:
    """Map an absolute URL to a path relative to the output folder.

    Only the path component is used; ``/`` and directory-like URLs map to
    ``index.html``. Dot segments are dropped so the result always stays
    inside the output folder.
    """

    try:
        path = unquote(urlparse(url).path, errors="replace")
    except ValueError:
        return _fallback_path(url)

    is_dir = not path or path.endswith(("/", "\\"))
    parts = [
        _INVALID_FILENAME_CHARS.sub("_", seg)
        for seg in _SEPARATORS.split(path)
        if seg not in {"", ".", ".."}
    ]
    if is_dir or not parts:
        parts.append(INDEX_FILENAME)
    return Path(*parts)


def available_folder_name(
    parent: Path,
    base_name: str = "site",
    *,
    limit: int = 1000,
) -> Path:
    candidate = parent / base_name
    if not candidate.exists():
        return candidate
    for i in range(2, limit):
        candidate = parent / f"{base_name}{i}"
        if not candidate.exists():
            return candidate
    raise OutputFolderError(
        f"Too many existing folders: {base_name}, {base_name}2, ..., "
        f"{base_name}{limit - 1}"
    )
