"""page-mirror core library.

This package mirrors a single web page and the resources it references
(stylesheets, scripts, images, fonts and anything pulled in from those
stylesheets) into a local folder that can be browsed offline.

Layout:
- ``urls`` / ``paths``: resolution and URL -> local path mapping.
- ``extract``: reference discovery in markup and stylesheet text.
- ``fetcher`` / ``http_client``: one download, persisted to disk.
- ``mirror``: the scheduler that drives the whole run.
"""

from __future__ import annotations

__all__ = ["__version__"]

__version__ = "0.1.0"
