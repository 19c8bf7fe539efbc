from __future__ import annotations

import re
from urllib.parse import urljoin

from bs4 import BeautifulSoup

# Both patterns tolerate optional single/double quotes around the target.
CSS_URL_RE = re.compile(r"url\(\s*(['\"]?)(.*?)\1\s*\)", re.IGNORECASE | re.DOTALL)
CSS_IMPORT_RE = re.compile(
    r"@import\s+(?:url\(\s*)?(['\"]?)([^'\";)\s]+)\1\s*\)?[^;]*;",
    re.IGNORECASE,
)


def _attr_text(val: object) -> str:
    if isinstance(val, list):
        if not val:
            return ""
        return " ".join(str(v) for v in val)
    return str(val or "").strip()


def _is_candidate(ref: str) -> bool:
    if not ref:
        return False
    if ref.startswith("#"):
        return False
    lowered = ref.lower()
    if lowered.startswith("javascript:") or lowered.startswith("data:"):
        return False
    return True


def _as_soup(html: str | BeautifulSoup) -> BeautifulSoup:
    if isinstance(html, BeautifulSoup):
        return html
    return BeautifulSoup(html, "html.parser")


def document_base_url(html: str | BeautifulSoup, page_url: str) -> str:
    """Return the anchor for relative references found in ``html``.

    A ``<base href>`` element overrides the page URL.
    """

    soup = _as_soup(html)
    base = soup.find("base", href=True)
    if base is None:
        return page_url
    base_href = _attr_text(base.get("href"))
    if not base_href:
        return page_url
    return urljoin(page_url, base_href)


def extract_markup_references(html: str | BeautifulSoup) -> set[str]:
    """Collect candidate reference strings from a page.

    Sources: stylesheet ``<link href>``, ``<script src>``, and ``src`` (or
    failing that ``href``) of every other element carrying either one.
    Fragments, ``javascript:`` pseudo-URLs, inline ``data:`` URIs and empty
    values are dropped.
    """

    soup = _as_soup(html)
    refs: set[str] = set()

    for link in soup.select("link[href]"):
        rels = link.get("rel") or []
        if isinstance(rels, str):
            rels = rels.split()
        if "stylesheet" not in {r.lower() for r in rels}:
            continue
        href = _attr_text(link.get("href"))
        if _is_candidate(href):
            refs.add(href)

    for script in soup.select("script[src]"):
        src = _attr_text(script.get("src"))
        if _is_candidate(src):
            refs.add(src)

    for tag in soup.select("[src], [href]"):
        src = tag.get("src")
        ref = _attr_text(src if src is not None else tag.get("href"))
        if _is_candidate(ref):
            refs.add(ref)

    return refs


def extract_stylesheet_references(css: str) -> set[str]:
    """Collect ``url(...)`` and ``@import`` targets from stylesheet text.

    Inline ``data:`` URIs are never returned.
    """

    refs: set[str] = set()
    for m in CSS_URL_RE.finditer(css):
        ref = m.group(2).strip()
        if ref and not ref.lower().startswith("data:"):
            refs.add(ref)
    for m in CSS_IMPORT_RE.finditer(css):
        ref = m.group(2).strip()
        if ref and not ref.lower().startswith("data:"):
            refs.add(ref)
    return refs
