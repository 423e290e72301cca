"""Tests for EntryManager class."""

import json
import tempfile
from pathlib import Path

from apkfeed.core.entry import EntryManager
from apkfeed.core.types import ExtractedItem

URL = "https://apps.example.com/games/turbo-racer-3d/"


def _item():
    return ExtractedItem(
        title="Turbo Racer 3D",
        slug="turbo-racer-3d",
        body_html="<p>Race.</p>",
        keywords=["racing"],
        app_size="12 MB",
        source_url=URL,
    )


def test_entry_folder_naming():
    """Entry folder should be slug-shortHash format"""
    manager = EntryManager(Path("/tmp/test_items"), URL, "turbo-racer-3d")

    assert manager.folder.name == "turbo-racer-3d-8798e"


def test_entry_folder_slug_is_sanitized_and_capped():
    """Slugs are re-slugified and capped at 50 characters"""
    manager = EntryManager(Path("/tmp/test_items"), URL, "Weird Slug/With Spaces " + "x" * 80)

    name = manager.folder.name
    assert name.startswith("weird-slug-with-spaces-")
    assert len(name) == 50 + len("-8798e")


def test_entry_folder_paths():
    """Entry manager should provide correct file paths"""
    manager = EntryManager(Path("/tmp/test_items"), URL, "turbo-racer-3d")

    assert manager.fetched_html.name == "fetched.html"
    assert manager.item_json.name == "item.json"


def test_ensure_folder():
    """ensure_folder should create directory"""
    with tempfile.TemporaryDirectory() as tmpdir:
        manager = EntryManager(Path(tmpdir), URL, "turbo-racer-3d")

        manager.ensure_folder()
        assert manager.folder.exists()
        assert manager.folder.is_dir()


def test_write_and_read_item():
    """Should write item.json and read it back"""
    with tempfile.TemporaryDirectory() as tmpdir:
        manager = EntryManager(Path(tmpdir), URL, "turbo-racer-3d")
        assert not manager.exists()

        manager.write_item(_item())

        assert manager.exists()
        raw = json.loads(manager.item_json.read_text(encoding="utf-8"))
        assert raw["app_size"] == "12 MB"
        assert raw["app_version"] is None
        assert manager.read_item() == _item()


def test_read_item_missing():
    """Should return None if item.json doesn't exist"""
    with tempfile.TemporaryDirectory() as tmpdir:
        manager = EntryManager(Path(tmpdir), URL, "turbo-racer-3d")

        assert manager.read_item() is None


def test_write_fetched_html():
    """Raw page is cached next to the item record"""
    with tempfile.TemporaryDirectory() as tmpdir:
        manager = EntryManager(Path(tmpdir), URL, "turbo-racer-3d")

        manager.write_fetched_html("<html>raw</html>")

        assert manager.fetched_html.read_text(encoding="utf-8") == "<html>raw</html>"
