from pathlib import Path

from apkfeed.config import AppConfig, load_config
from apkfeed.extract.rules import ExtractionRules


def test_load_config_defaults():
    cfg = load_config(None)

    assert cfg == AppConfig()
    assert cfg.linking.relevance_floor == 0.1
    assert cfg.extract.fingerprint_threshold == 3
    assert cfg.extract.body_fallback == ["description", "document"]


def test_load_config_returns_independent_copies():
    first = load_config(None)
    first.extract.body_fallback.append("readability")

    assert load_config(None).extract.body_fallback == ["description", "document"]


def test_load_config_merges_partial_yaml(tmp_path: Path):
    path = tmp_path / "config.yaml"
    path.write_text(
        "crawl:\n"
        "  max_pages: 2\n"
        "linking:\n"
        "  relevance_floor: 0.25\n"
        "  item_path_prefix: /post/\n"
        "unknown_section:\n"
        "  x: 1\n",
        encoding="utf-8",
    )

    cfg = load_config(str(path))

    assert cfg.crawl.max_pages == 2
    assert cfg.crawl.max_items == 50
    assert cfg.linking.relevance_floor == 0.25
    assert cfg.linking.item_path_prefix == "/post/"
    assert cfg.fetch.timeout_seconds == 30.0


def test_load_config_empty_file(tmp_path: Path):
    path = tmp_path / "empty.yaml"
    path.write_text("", encoding="utf-8")

    assert load_config(str(path)) == AppConfig()


def test_extraction_rules_from_config():
    cfg = load_config(None)
    cfg.extract.fingerprint_threshold = 4
    cfg.extract.min_content_chars = 50
    cfg.extract.body_fallback = ["readability", "document"]

    rules = ExtractionRules.from_config(cfg.extract)

    assert rules.fingerprint_threshold == 4
    assert rules.min_content_chars == 50
    assert rules.body_fallback == ("readability", "document")
    assert rules.content_selectors[0] == ".entry-content"
