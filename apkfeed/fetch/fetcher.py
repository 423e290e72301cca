"""
HTTP fetching for listing pages, item pages and images.

Provides the FetchResult value, the Fetcher protocol the crawler, extractor
and rehoster depend on, and HttpFetcher, an httpx-backed implementation with
retry logic, timeout configuration and environment proxy support.
"""

from __future__ import annotations

from dataclasses import dataclass
import time
from typing import Callable, Protocol

import httpx

from ..config import FetchConfig
from ..core.errors import FetchError


@dataclass
class FetchResult:
    """Result of an HTTP fetch operation.

    Either text/content will be populated (success) or error will be populated
    (failure), but never both. status_code may be None for network-level failures.

    Attributes:
        url: The URL that was fetched
        status_code: HTTP status code, or None if request failed before getting response
        text: The decoded response body, or None on error
        error: Error message if fetch failed, None on success
        content: The raw response bytes, or None on error
    """
    url: str
    status_code: int | None
    text: str | None
    error: str | None
    content: bytes | None = None

    @property
    def ok(self) -> bool:
        return self.error is None

    def raise_for_error(self) -> "FetchResult":
        """Raise FetchError if this result is a failure, else return self."""
        if self.error is not None:
            raise FetchError(self.url, self.error, status_code=self.status_code)
        return self


class Fetcher(Protocol):
    def fetch(self, url: str) -> FetchResult: ...


class HttpFetcher:
    """Synchronous httpx fetcher shared across a crawl or scrape run.

    Follows redirects, sends a browser-like User-Agent and treats any non-2xx
    response as a failure. Server errors (5xx) and transport exceptions are
    retried with linear backoff; client errors (4xx) are returned immediately.
    """

    def __init__(
        self,
        cfg: FetchConfig | None = None,
        transport: httpx.BaseTransport | None = None,
        sleep: Callable[[float], None] = time.sleep,
    ):
        self._cfg = cfg or FetchConfig()
        self._sleep = sleep
        self._client = httpx.Client(
            timeout=self._cfg.timeout_seconds,
            headers={"User-Agent": self._cfg.user_agent},
            follow_redirects=True,
            trust_env=self._cfg.trust_env,
            transport=transport,
        )

    def fetch(self, url: str) -> FetchResult:
        retries = self._cfg.retries
        last = FetchResult(url=url, status_code=None, text=None, error="not attempted")

        for attempt in range(retries + 1):
            try:
                resp = self._client.get(url)
            except Exception as exc:  # noqa: BLE001
                last = FetchResult(
                    url=url, status_code=None, text=None, error=f"{type(exc).__name__}: {exc}"
                )
            else:
                if resp.is_success:
                    return FetchResult(
                        url=url,
                        status_code=resp.status_code,
                        text=resp.text,
                        error=None,
                        content=resp.content,
                    )
                last = FetchResult(
                    url=url,
                    status_code=resp.status_code,
                    text=None,
                    error=f"HTTP {resp.status_code}",
                )
                if resp.status_code < 500:
                    return last
            if attempt < retries:
                # Linear backoff: 0.5s, 1.0s, 1.5s...
                self._sleep(0.5 * (attempt + 1))

        return last

    def close(self) -> None:
        self._client.close()

    def __enter__(self) -> "HttpFetcher":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()
