"""
Image rehosting.

AssetRehoster walks <img> elements in extracted content, resolves their URLs
against the page, fetches the bytes and pushes them to an AssetStore,
rewriting src to the durable URL. Every image is handled independently: a
fetch or upload failure keeps the original src and moves on.
"""

from __future__ import annotations

import hashlib
import logging
from pathlib import Path, PurePosixPath
from typing import Protocol
from urllib.parse import urljoin, urlparse

from bs4 import BeautifulSoup

from ..core.errors import FetchError, UploadError
from ..fetch.fetcher import Fetcher
from ..fetch.politeness import NoDelay, PolitenessPolicy
from ..logging_utils import log_event

IMAGE_SOURCE_ATTRS: tuple[str, ...] = ("src", "data-src", "data-lazy-src", "data-original")
LAZY_ATTRS: tuple[str, ...] = ("data-src", "data-lazy-src", "data-original", "srcset", "data-srcset")

_MAGIC_EXTENSIONS: tuple[tuple[bytes, str], ...] = (
    (b"\x89PNG\r\n\x1a\n", ".png"),
    (b"\xff\xd8\xff", ".jpg"),
    (b"GIF87a", ".gif"),
    (b"GIF89a", ".gif"),
    (b"<svg", ".svg"),
)
_KNOWN_EXTENSIONS = {".png", ".jpg", ".jpeg", ".gif", ".webp", ".svg", ".avif"}


class AssetStore(Protocol):
    def upload(self, data: bytes, folder: str, filename: str | None = None) -> str:
        """Persist bytes and return a durable URL; raise UploadError on failure."""
        ...


class DirectoryAssetStore:
    """Content-addressed asset store writing files under a local directory.

    Files are named by the SHA-256 of their bytes, so re-uploading the same
    image returns the same URL without writing twice.
    """

    def __init__(self, root: Path, public_base_url: str):
        self.root = Path(root)
        self.public_base_url = public_base_url.rstrip("/")

    def upload(self, data: bytes, folder: str, filename: str | None = None) -> str:
        if not data:
            raise UploadError("refusing to store an empty file")
        name = hashlib.sha256(data).hexdigest() + _guess_extension(data, filename)
        target_dir = self.root / folder
        target = target_dir / name
        try:
            target_dir.mkdir(parents=True, exist_ok=True)
            if not target.exists():
                target.write_bytes(data)
        except OSError as exc:
            raise UploadError(f"{target}: {exc}") from exc
        return f"{self.public_base_url}/{folder}/{name}"


def _guess_extension(data: bytes, filename: str | None) -> str:
    if filename:
        suffix = PurePosixPath(filename).suffix.lower()
        if suffix in _KNOWN_EXTENSIONS:
            return suffix
    for magic, ext in _MAGIC_EXTENSIONS:
        if data.startswith(magic):
            return ext
    if data[:4] == b"RIFF" and data[8:12] == b"WEBP":
        return ".webp"
    return ".jpg"


def resolve_url(src: str, page_url: str) -> str:
    """Resolve protocol-relative, root-relative and relative URLs against the page."""
    src = src.strip()
    if src.startswith("//"):
        return "https:" + src
    if src.startswith(("http://", "https://")):
        return src
    try:
        return urljoin(page_url, src)
    except ValueError:
        return src


class AssetRehoster:
    """Rehosts images through an AssetStore, one at a time.

    Attributes:
        fetcher: Fetches image bytes
        store: Destination store; None disables rehosting
        politeness: Gate consulted before each image fetch, keyed by host
        folder: Store folder for uploaded images
        default_alt: Alt text for rehosted images without one
    """

    def __init__(
        self,
        fetcher: Fetcher,
        store: AssetStore | None,
        politeness: PolitenessPolicy | None = None,
        folder: str = "items",
        default_alt: str = "App screenshot",
        logger: logging.Logger | None = None,
    ):
        self.fetcher = fetcher
        self.store = store
        self.politeness = politeness or NoDelay()
        self.folder = folder
        self.default_alt = default_alt
        self.logger = logger or logging.getLogger("apkfeed.assets")

    @property
    def enabled(self) -> bool:
        return self.store is not None

    def rehost_url(self, src: str, page_url: str) -> str:
        """Upload one image and return its durable URL.

        Raises:
            FetchError: The image could not be fetched
            UploadError: The store rejected the bytes
            RuntimeError: No store is configured
        """
        if self.store is None:
            raise RuntimeError("no asset store configured")
        absolute = resolve_url(src, page_url)
        try:
            parsed = urlparse(absolute)
            host = parsed.netloc
        except ValueError as exc:
            raise FetchError(absolute, f"invalid image URL: {exc}") from exc
        self.politeness.wait(host)
        result = self.fetcher.fetch(absolute).raise_for_error()
        if not result.content:
            raise FetchError(absolute, "empty image body", status_code=result.status_code)
        filename = PurePosixPath(parsed.path).name or None
        return self.store.upload(result.content, self.folder, filename=filename)

    def try_rehost_url(self, src: str, page_url: str) -> str:
        """Like rehost_url, but fall back to the absolute source URL on failure."""
        absolute = resolve_url(src, page_url)
        if self.store is None:
            return absolute
        try:
            durable = self.rehost_url(absolute, page_url)
        except (FetchError, UploadError) as exc:
            log_event(
                self.logger,
                "Image kept at source",
                level=logging.WARNING,
                event="image_skipped",
                src=absolute,
                error=str(exc),
            )
            return absolute
        log_event(self.logger, "Image rehosted", event="image_rehosted", src=absolute, durable_url=durable)
        return durable

    def rehost_html(self, html: str, page_url: str) -> str:
        """Rewrite every <img> in `html` to point at the asset store."""
        if self.store is None or not html:
            return html
        soup = BeautifulSoup(html, "html.parser")
        images = soup.find_all("img")
        if not images:
            return html
        changed = False
        for img in images:
            src = next((img.get(attr) for attr in IMAGE_SOURCE_ATTRS if img.get(attr)), None)
            if not src or src.startswith("data:"):
                continue
            absolute = resolve_url(src, page_url)
            try:
                durable = self.rehost_url(absolute, page_url)
            except (FetchError, UploadError) as exc:
                log_event(
                    self.logger,
                    "Image kept at source",
                    level=logging.WARNING,
                    event="image_skipped",
                    src=absolute,
                    error=str(exc),
                )
                continue
            img["src"] = durable
            for attr in LAZY_ATTRS:
                if attr in img.attrs:
                    del img[attr]
            if not img.get("alt"):
                img["alt"] = self.default_alt
            changed = True
            log_event(self.logger, "Image rehosted", event="image_rehosted", src=absolute, durable_url=durable)
        return soup.decode() if changed else html
