"""Tests for the scrape and auto-link pipelines."""

from __future__ import annotations

import io
import json
from pathlib import Path

import pytest
from rich.console import Console

from apkfeed import runner
from apkfeed.config import AppConfig
from apkfeed.core.errors import FetchError
from apkfeed.fetch.fetcher import FetchResult

SEED = "https://x.test/category/games/"
LISTING = (
    '<article><a href="/app/cool-app/">Cool App</a></article>'
    '<article><a href="/app/broken/">Broken</a></article>'
)
ITEM = (
    "<html><body><article><h1>Cool App</h1><p>Size: 12 MB. Android 5.0+.</p>"
    '<img src="/x.png"></article><aside class="widget">ads</aside></body></html>'
)


class StubFetcher:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if url not in self.responses:
            return FetchResult(url=url, status_code=404, text=None, error="HTTP 404")
        body = self.responses[url]
        if isinstance(body, bytes):
            return FetchResult(url=url, status_code=200, text="", error=None, content=body)
        return FetchResult(url=url, status_code=200, text=body, error=None, content=body.encode())


class StubStore:
    def upload(self, data, folder, filename=None):
        return "https://cdn/x.png"


def _cfg() -> AppConfig:
    cfg = AppConfig()
    cfg.crawl.page_delay_seconds = 0
    cfg.crawl.item_delay_seconds = 0
    cfg.assets.upload_delay_seconds = 0
    cfg.logging.console = False
    cfg.logging.file = False
    return cfg


def _fetcher() -> StubFetcher:
    return StubFetcher(
        {
            SEED: LISTING,
            "https://x.test/app/cool-app": ITEM,
            "https://x.test/x.png": b"\x89PNG\r\n\x1a\n",
        }
    )


def _console() -> Console:
    return Console(file=io.StringIO())


def test_run_scrape_writes_items_and_report(tmp_path: Path):
    report_path = runner.run_scrape(
        SEED, tmp_path, _cfg(), show_progress=False, console=_console(), fetcher=_fetcher(), store=StubStore()
    )

    report = json.loads(report_path.read_text(encoding="utf-8"))
    assert report["seed_url"] == SEED
    assert report["stats"] == {"discovered": 2, "total": 2, "created": 1, "updated": 0, "failed": 1}
    statuses = {r["url"]: r["status"] for r in report["results"]}
    assert statuses == {"https://x.test/app/cool-app": "created", "https://x.test/app/broken": "failed"}

    item_files = list((tmp_path / "items").glob("*/item.json"))
    assert len(item_files) == 1
    item = json.loads(item_files[0].read_text(encoding="utf-8"))
    assert item["title"] == "Cool App"
    assert item["app_size"] == "12 MB"
    assert 'src="https://cdn/x.png"' in item["body_html"]
    assert not list((tmp_path / "items").glob("*/fetched.html"))


def test_run_scrape_second_run_updates(tmp_path: Path):
    cfg = _cfg()
    cfg.cache.save_html = True
    runner.run_scrape(SEED, tmp_path, cfg, show_progress=False, console=_console(), fetcher=_fetcher())

    report_path = runner.run_scrape(
        SEED, tmp_path, cfg, show_progress=True, console=_console(), fetcher=_fetcher()
    )

    stats = json.loads(report_path.read_text(encoding="utf-8"))["stats"]
    assert stats["created"] == 0
    assert stats["updated"] == 1
    assert len(list((tmp_path / "items").glob("*/fetched.html"))) == 1


def test_run_scrape_caps_items(tmp_path: Path):
    cfg = _cfg()
    cfg.crawl.max_items = 1
    fetcher = _fetcher()

    report_path = runner.run_scrape(SEED, tmp_path, cfg, show_progress=False, console=_console(), fetcher=fetcher)

    stats = json.loads(report_path.read_text(encoding="utf-8"))["stats"]
    assert stats["discovered"] == 2
    assert stats["total"] == 1
    assert "https://x.test/app/broken" not in fetcher.calls


def test_run_scrape_single_item_seed(tmp_path: Path):
    fetcher = _fetcher()

    report_path = runner.run_scrape(
        "https://x.test/app/cool-app/", tmp_path, _cfg(), show_progress=False, console=_console(), fetcher=fetcher
    )

    stats = json.loads(report_path.read_text(encoding="utf-8"))["stats"]
    assert stats["created"] == 1
    assert fetcher.calls == ["https://x.test/app/cool-app"]


def test_run_scrape_seed_failure_raises(tmp_path: Path):
    with pytest.raises(FetchError):
        runner.run_scrape(
            SEED, tmp_path, _cfg(), show_progress=False, console=_console(), fetcher=StubFetcher({})
        )


def _write_export(path: Path) -> None:
    data = {
        "items": [
            {"id": "a", "title": "Turbo Racer 3D", "slug": "turbo-racer-3d", "content": "<p>Turbo racing fun.</p>"},
            {
                "id": "b",
                "title": "Turbo Racer 3D Mod Unlimited Coins",
                "slug": "turbo-racer-3d-mod",
                "content": "<p>Unlimited coins for turbo racing.</p>",
            },
            {"id": "c", "title": "Farm Story", "slug": "farm-story", "content": "<p>Plant crops.</p>"},
        ]
    }
    path.write_text(json.dumps(data), encoding="utf-8")


def test_run_auto_link(tmp_path: Path):
    items_path = tmp_path / "items.json"
    output_path = tmp_path / "out" / "linked.json"
    _write_export(items_path)

    results = runner.run_auto_link(items_path, output_path, _cfg(), console=_console())

    assert sorted(r.item_id for r in results) == ["a", "b"]
    written = json.loads(output_path.read_text(encoding="utf-8"))
    assert written["total"] == 2
    assert all(item["linksInserted"] == 1 for item in written["items"])


def test_run_auto_link_single_item(tmp_path: Path):
    items_path = tmp_path / "items.json"
    _write_export(items_path)

    results = runner.run_auto_link(items_path, tmp_path / "linked.json", _cfg(), item_id="b", console=_console())

    assert [r.item_id for r in results] == ["b"]
    assert 'href="/item/turbo-racer-3d"' in results[0].updated_html


def test_run_auto_link_unknown_item(tmp_path: Path):
    items_path = tmp_path / "items.json"
    _write_export(items_path)

    with pytest.raises(ValueError):
        runner.run_auto_link(items_path, tmp_path / "linked.json", _cfg(), item_id="zzz", console=_console())
