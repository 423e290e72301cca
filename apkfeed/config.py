"""
Configuration management using YAML files and dataclasses.

This module defines all configuration dataclasses and provides loading
from YAML files with defaults. Configuration sections:
- FetchConfig: HTTP fetching settings
- CrawlConfig: Listing pagination and batch limits
- ExtractConfig: Content extraction thresholds
- AssetConfig: Image rehosting and asset store settings
- LinkingConfig: Internal-linking engine settings
- LoggingConfig: Logging behavior
- CacheConfig: Per-item raw page caching
- AppConfig: Root configuration container
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

import yaml


@dataclass
class FetchConfig:
    """Configuration for HTTP fetching.

    Attributes:
        timeout_seconds: HTTP request timeout
        retries: Number of retry attempts for failed requests
        trust_env: Whether to respect system proxy settings
        user_agent: HTTP User-Agent header string
    """

    timeout_seconds: float = 30.0
    retries: int = 2
    trust_env: bool = True
    user_agent: str = (
        "Mozilla/5.0 (Windows NT 10.0; Win64; x64) "
        "AppleWebKit/537.36 (KHTML, like Gecko) "
        "Chrome/120.0.0.0 Safari/537.36"
    )


@dataclass
class CrawlConfig:
    """Configuration for link discovery and batch scraping.

    Attributes:
        max_pages: Maximum listing pages to paginate through
        page_delay_seconds: Minimum interval between listing page fetches
        item_delay_seconds: Minimum interval between item extractions in a batch
        max_items: Cap on discovered URLs scraped per run
    """

    max_pages: int = 5
    page_delay_seconds: float = 1.0
    item_delay_seconds: float = 2.0
    max_items: int = 50


@dataclass
class ExtractConfig:
    """Configuration for HTML content extraction.

    Attributes:
        min_content_chars: Minimum stripped HTML length for a content container
        fingerprint_threshold: Metadata fingerprints needed to drop a block
        fingerprint_max_chars: Blocks with at least this much text are kept
        placeholder_title: Title used when no heading is found
        max_slug_length: Maximum length of a title-derived slug
        body_fallback: Steps tried after the container selectors fail
            ("description", "readability", "document")
    """

    min_content_chars: int = 200
    fingerprint_threshold: int = 3
    fingerprint_max_chars: int = 500
    placeholder_title: str = "Untitled Item"
    max_slug_length: int = 100
    body_fallback: list[str] = field(default_factory=lambda: ["description", "document"])


@dataclass
class AssetConfig:
    """Configuration for image rehosting.

    Attributes:
        directory: Root of the local asset store; rehosting is skipped when unset
        public_base_url: URL prefix the stored files are served under
        folder: Sub-folder for uploaded images
        default_alt: Alt text added to rehosted images without one
        upload_delay_seconds: Minimum interval between image fetches per host
    """

    directory: str | None = None
    public_base_url: str = "/assets"
    folder: str = "items"
    default_alt: str = "App screenshot"
    upload_delay_seconds: float = 0.5


@dataclass
class LinkingConfig:
    """Configuration for the internal-linking engine.

    Attributes:
        item_path_prefix: Path prefix of internal item links
        max_links: Maximum related links inserted per item
        relevance_floor: Scores at or below this are discarded
        min_keyword_length: Minimum keyword length for similarity
        strip_external: Strip outbound links before inserting internal ones
        meta_description_max: Maximum refreshed meta description length
    """

    item_path_prefix: str = "/item/"
    max_links: int = 3
    relevance_floor: float = 0.1
    min_keyword_length: int = 4
    strip_external: bool = True
    meta_description_max: int = 160


@dataclass
class LoggingConfig:
    """Configuration for logging behavior.

    Attributes:
        level: Logging level ("DEBUG", "INFO", "WARNING", "ERROR")
        console: Whether to log to console
        file: Whether to log to file
        format: Log file format ("jsonl" or "plain")
        filename: Name of the main log file
    """

    level: str = "INFO"
    console: bool = True
    file: bool = True
    format: str = "jsonl"
    filename: str = "run.jsonl"


@dataclass
class CacheConfig:
    """Configuration for caching.

    Attributes:
        save_html: Whether to keep the fetched page next to each item.json
    """

    save_html: bool = False


@dataclass
class AppConfig:
    """Root configuration container aggregating all config sections."""

    fetch: FetchConfig = field(default_factory=FetchConfig)
    crawl: CrawlConfig = field(default_factory=CrawlConfig)
    extract: ExtractConfig = field(default_factory=ExtractConfig)
    assets: AssetConfig = field(default_factory=AssetConfig)
    linking: LinkingConfig = field(default_factory=LinkingConfig)
    logging: LoggingConfig = field(default_factory=LoggingConfig)
    cache: CacheConfig = field(default_factory=CacheConfig)


DEFAULT_CONFIG = AppConfig()


def load_config(path: str | None) -> AppConfig:
    """Load configuration from a YAML file with defaults."""
    if not path:
        return _fromdict(_asdict(DEFAULT_CONFIG))

    with open(path, "r", encoding="utf-8") as f:
        raw = yaml.safe_load(f) or {}

    return _merge_config(DEFAULT_CONFIG, raw)


def _merge_config(base: AppConfig, raw: dict[str, Any]) -> AppConfig:
    """Merge raw YAML config into base AppConfig."""
    data = _asdict(base)
    for key, value in raw.items():
        if key not in data:
            continue
        if isinstance(value, dict) and isinstance(data[key], dict):
            data[key].update(value)
        else:
            data[key] = value
    return _fromdict(data)


def _asdict(cfg: AppConfig) -> dict[str, Any]:
    """Convert AppConfig to nested dictionary."""
    return {
        "fetch": {
            "timeout_seconds": cfg.fetch.timeout_seconds,
            "retries": cfg.fetch.retries,
            "trust_env": cfg.fetch.trust_env,
            "user_agent": cfg.fetch.user_agent,
        },
        "crawl": {
            "max_pages": cfg.crawl.max_pages,
            "page_delay_seconds": cfg.crawl.page_delay_seconds,
            "item_delay_seconds": cfg.crawl.item_delay_seconds,
            "max_items": cfg.crawl.max_items,
        },
        "extract": {
            "min_content_chars": cfg.extract.min_content_chars,
            "fingerprint_threshold": cfg.extract.fingerprint_threshold,
            "fingerprint_max_chars": cfg.extract.fingerprint_max_chars,
            "placeholder_title": cfg.extract.placeholder_title,
            "max_slug_length": cfg.extract.max_slug_length,
            "body_fallback": list(cfg.extract.body_fallback),
        },
        "assets": {
            "directory": cfg.assets.directory,
            "public_base_url": cfg.assets.public_base_url,
            "folder": cfg.assets.folder,
            "default_alt": cfg.assets.default_alt,
            "upload_delay_seconds": cfg.assets.upload_delay_seconds,
        },
        "linking": {
            "item_path_prefix": cfg.linking.item_path_prefix,
            "max_links": cfg.linking.max_links,
            "relevance_floor": cfg.linking.relevance_floor,
            "min_keyword_length": cfg.linking.min_keyword_length,
            "strip_external": cfg.linking.strip_external,
            "meta_description_max": cfg.linking.meta_description_max,
        },
        "logging": {
            "level": cfg.logging.level,
            "console": cfg.logging.console,
            "file": cfg.logging.file,
            "format": cfg.logging.format,
            "filename": cfg.logging.filename,
        },
        "cache": {
            "save_html": cfg.cache.save_html,
        },
    }


def _fromdict(data: dict[str, Any]) -> AppConfig:
    """Reconstruct AppConfig from nested dictionary."""
    return AppConfig(
        fetch=FetchConfig(**data["fetch"]),
        crawl=CrawlConfig(**data["crawl"]),
        extract=ExtractConfig(**data["extract"]),
        assets=AssetConfig(**data["assets"]),
        linking=LinkingConfig(**data["linking"]),
        logging=LoggingConfig(**data["logging"]),
        cache=CacheConfig(**data.get("cache", {})),
    )
