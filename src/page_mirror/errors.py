from __future__ import annotations


class MirrorError(Exception):
    """Base class for errors that abort a mirroring run."""


class InvalidRootUrlError(MirrorError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Invalid URL: {url!r}")
        self.url = url


class RootFetchError(MirrorError):
    def __init__(self, url: str) -> None:
        super().__init__(f"Error downloading main page: {url}")
        self.url = url


class OutputFolderError(MirrorError):
    pass


class TransportError(MirrorError):
    """Raised by the HTTP client once retries are exhausted.

    Callers below the scheduler treat this as a skipped resource.
    """
