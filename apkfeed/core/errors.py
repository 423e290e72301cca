"""Exception types shared across apkfeed."""

from __future__ import annotations


class HarvestError(Exception):
    """Base class for apkfeed errors."""


class FetchError(HarvestError):
    """A page or image could not be fetched (network, timeout, non-2xx)."""

    def __init__(self, url: str, message: str, status_code: int | None = None):
        super().__init__(f"{url}: {message}")
        self.url = url
        self.status_code = status_code


class UploadError(HarvestError):
    """The asset store rejected or failed to persist an upload."""


class ExtractionError(HarvestError):
    """An item page did not yield the required title/slug."""
