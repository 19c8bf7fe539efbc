from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

from .errors import InvalidRootUrlError, OutputFolderError, RootFetchError
from .http_client import DEFAULT_USER_AGENT, HttpClient, build_session
from .mirror import DEFAULT_MAX_CONCURRENCY, Mirror, MirrorConfig
from .paths import available_folder_name
from .urls import is_absolute_http_url

logger = logging.getLogger(__name__)


def _int_at_least(minimum: int):
    def _parse(text: str) -> int:
        try:
            value = int(text)
        except ValueError:
            raise argparse.ArgumentTypeError(f"invalid int value: {text!r}")
        if value < minimum:
            raise argparse.ArgumentTypeError(f"must be >= {minimum}, got {value}")
        return value

    return _parse


def _build_parser() -> argparse.ArgumentParser:
    p = argparse.ArgumentParser(
        prog="page-mirror",
        description=(
            "Save a web page and the stylesheets, scripts, images and fonts "
            "it references into a local folder"
        ),
    )
    p.add_argument(
        "url",
        nargs="?",
        default=None,
        help="Page to mirror; prompted for when omitted",
    )
    p.add_argument(
        "--out",
        type=Path,
        default=None,
        help="Exact output folder (default: first free site, site2, ...)",
    )
    p.add_argument(
        "--out-parent",
        type=Path,
        default=Path("."),
        help="Where the default output folder is created",
    )
    p.add_argument(
        "--concurrency",
        type=_int_at_least(1),
        default=DEFAULT_MAX_CONCURRENCY,
        help="Max simultaneous downloads",
    )
    p.add_argument("--timeout", type=float, default=30)
    p.add_argument("--retries", type=_int_at_least(0), default=2)
    p.add_argument("--user-agent", default=DEFAULT_USER_AGENT)
    p.add_argument(
        "--manifest",
        action="store_true",
        help="Write manifest.jsonl/manifest.json into the output folder",
    )
    p.add_argument(
        "--anchor-css-to-root",
        action="store_true",
        help=(
            "Resolve stylesheet references against the page URL instead of "
            "the stylesheet's own URL"
        ),
    )
    p.add_argument("--verbose", action="store_true", help="debug logging")
    return p


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.INFO,
        format="%(levelname)s %(message)s",
    )

    url = args.url
    if url is None:
        try:
            url = input("Enter URL (e.g. https://example.com): ")
        except EOFError:
            url = ""
    url = url.strip()

    if not is_absolute_http_url(url):
        print("! Invalid URL.", file=sys.stderr)
        return 2

    out_dir = args.out
    if out_dir is None:
        try:
            out_dir = available_folder_name(args.out_parent)
        except OutputFolderError as e:
            print(f"! {e}", file=sys.stderr)
            return 2

    config = MirrorConfig(
        out_dir=out_dir,
        max_concurrency=int(args.concurrency),
        timeout_s=float(args.timeout),
        max_retries=int(args.retries),
        user_agent=str(args.user_agent),
        write_manifest=bool(args.manifest),
        anchor_css_to_root=bool(args.anchor_css_to_root),
    )
    http = HttpClient(
        build_session(config.user_agent),
        timeout_s=config.timeout_s,
        max_retries=config.max_retries,
        backoff_base_s=config.backoff_base_s,
    )
    mirror = Mirror(http=http, config=config)

    try:
        summary = mirror.run(url)
    except InvalidRootUrlError:
        print("! Invalid URL.", file=sys.stderr)
        return 2
    except RootFetchError:
        print("! Error downloading main page.", file=sys.stderr)
        return 3
    except OSError as e:
        print(f"! Cannot write to folder '{out_dir}': {e}", file=sys.stderr)
        return 2

    stats = summary.stats
    logger.info(
        "fetched=%s skipped=%s error=%s unresolved=%s",
        stats.get("fetched", 0),
        stats.get("skipped", 0),
        stats.get("error", 0),
        stats.get("unresolved", 0),
    )
    print(f"> Done! All files saved in folder '{summary.out_dir}'.")
    return 0
