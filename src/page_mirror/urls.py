from __future__ import annotations

from urllib.parse import ParseResult, urljoin, urlparse, urlunparse

_FETCHABLE_SCHEMES = {"http", "https"}


def _remove_dot_segments(path: str) -> str:
    segments = path.split("/")
    out: list[str] = []
    for seg in segments:
        if seg == "..":
            # Never pop the leading empty segment of an absolute path.
            if len(out) > 1:
                out.pop()
        elif seg != ".":
            out.append(seg)
    if segments[-1] in {".", ".."}:
        out.append("")
    return "/".join(out)


def normalize_url(raw_url: str) -> str:
    """Normalize an absolute URL for de-duplication.

    - Lowercases scheme + hostname.
    - Strips fragments.
    - Collapses ``.`` and ``..`` path segments.
    """

    parsed: ParseResult = urlparse(raw_url)
    scheme = (parsed.scheme or "").lower()
    netloc = (parsed.netloc or "").lower()
    path = _remove_dot_segments(parsed.path) or "/"

    parsed = parsed._replace(
        scheme=scheme,
        netloc=netloc,
        path=path,
        fragment="",
    )
    return urlunparse(parsed)


def is_absolute_http_url(text: str | None) -> bool:
    if not text:
        return False
    try:
        parsed = urlparse(text.strip())
        host = parsed.hostname
    except ValueError:
        return False
    return parsed.scheme.lower() in _FETCHABLE_SCHEMES and bool(host)


def resolve_url(base: str, ref: str) -> str | None:
    """Resolve ``ref`` against ``base``.

    Absolute references come back normalized; relative ones are joined per
    RFC 3986. Returns None instead of raising when either side is malformed
    or the result is not something we can GET.
    """

    ref = (ref or "").strip()
    if not ref:
        return None
    try:
        parsed = urlparse(ref)
        if parsed.scheme and parsed.netloc:
            joined = ref
        else:
            joined = urljoin(base, ref)
        if not is_absolute_http_url(joined):
            return None
        return normalize_url(joined)
    except ValueError:
        return None


def url_key(url: str) -> str:
    """Case-insensitive identity used by the visited set."""
    return url.casefold()
