from pathlib import Path

import pytest

from apkfeed.core.errors import FetchError, UploadError
from apkfeed.extract.assets import AssetRehoster, DirectoryAssetStore, resolve_url
from apkfeed.fetch.fetcher import FetchResult

PAGE = "https://apps.example.com/games/cool-app/"
PNG = b"\x89PNG\r\n\x1a\n" + b"\x00" * 16


class StubFetcher:
    def __init__(self, responses):
        self.responses = responses
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        status, content = self.responses.get(url, (404, None))
        if status >= 400:
            return FetchResult(url=url, status_code=status, text=None, error=f"HTTP {status}")
        return FetchResult(url=url, status_code=status, text="", error=None, content=content)


class StubStore:
    def __init__(self, fail=False):
        self.fail = fail
        self.uploads = []

    def upload(self, data, folder, filename=None):
        if self.fail:
            raise UploadError("bucket unavailable")
        self.uploads.append((folder, filename, data))
        return f"https://cdn.test/{folder}/{filename}"


class RecordingGate:
    def __init__(self):
        self.keys = []

    def wait(self, key):
        self.keys.append(key)


@pytest.mark.parametrize(
    "src,expected",
    [
        ("//img.test/a.png", "https://img.test/a.png"),
        ("/x.png", "https://apps.example.com/x.png"),
        ("shot.png", "https://apps.example.com/games/cool-app/shot.png"),
        ("http://other.test/b.jpg", "http://other.test/b.jpg"),
    ],
)
def test_resolve_url(src, expected):
    assert resolve_url(src, PAGE) == expected


def test_directory_store_is_content_addressed(tmp_path: Path):
    store = DirectoryAssetStore(tmp_path, "https://static.test/assets/")

    first = store.upload(PNG, "items", filename="shot")
    second = store.upload(PNG, "items", filename="other")

    assert first == second
    assert first.startswith("https://static.test/assets/items/")
    assert first.endswith(".png")
    assert len(list((tmp_path / "items").iterdir())) == 1


def test_directory_store_keeps_known_extension(tmp_path: Path):
    store = DirectoryAssetStore(tmp_path, "/assets")

    assert store.upload(b"webp-ish", "items", filename="a.WEBP").endswith(".webp")


def test_directory_store_rejects_empty_data(tmp_path: Path):
    store = DirectoryAssetStore(tmp_path, "/assets")

    with pytest.raises(UploadError):
        store.upload(b"", "items")


def test_rehost_html_rewrites_and_cleans_images():
    fetcher = StubFetcher({"https://apps.example.com/x.png": (200, PNG)})
    store = StubStore()
    gate = RecordingGate()
    rehoster = AssetRehoster(fetcher, store, politeness=gate)
    html = '<p>Hi</p><img data-src="/x.png" srcset="/x.png 2x" class="lazy">'

    out = rehoster.rehost_html(html, PAGE)

    assert 'src="https://cdn.test/items/x.png"' in out
    assert "data-src" not in out
    assert "srcset" not in out
    assert 'alt="App screenshot"' in out
    assert gate.keys == ["apps.example.com"]
    assert store.uploads[0][:2] == ("items", "x.png")


def test_rehost_html_isolates_failures():
    fetcher = StubFetcher({"https://apps.example.com/ok.png": (200, PNG)})
    rehoster = AssetRehoster(fetcher, StubStore())
    html = '<img src="/missing.png" alt="gone"><img src="/ok.png" alt="Screenshot">'

    out = rehoster.rehost_html(html, PAGE)

    assert 'src="/missing.png"' in out
    assert 'src="https://cdn.test/items/ok.png"' in out
    assert 'alt="Screenshot"' in out


def test_rehost_html_keeps_source_on_upload_error():
    fetcher = StubFetcher({"https://apps.example.com/x.png": (200, PNG)})
    rehoster = AssetRehoster(fetcher, StubStore(fail=True))
    html = '<img src="/x.png">'

    assert rehoster.rehost_html(html, PAGE) == html


def test_rehost_html_skips_data_urls_and_no_store():
    fetcher = StubFetcher({})
    html = '<img src="data:image/png;base64,AAAA"><img src="/x.png">'

    assert AssetRehoster(fetcher, None).rehost_html(html, PAGE) == html
    assert fetcher.calls == []

    AssetRehoster(fetcher, StubStore()).rehost_html(html, PAGE)
    assert fetcher.calls == ["https://apps.example.com/x.png"]


def test_rehost_url_raises_on_fetch_failure():
    rehoster = AssetRehoster(StubFetcher({}), StubStore())

    with pytest.raises(FetchError) as excinfo:
        rehoster.rehost_url("/missing.png", PAGE)

    assert excinfo.value.status_code == 404


def test_try_rehost_url_falls_back_to_absolute_source():
    rehoster = AssetRehoster(StubFetcher({}), StubStore())

    assert rehoster.try_rehost_url("/missing.png", PAGE) == "https://apps.example.com/missing.png"
    assert AssetRehoster(StubFetcher({}), None).try_rehost_url("//img.test/a.png", PAGE) == (
        "https://img.test/a.png"
    )


def test_malformed_image_src_is_skipped():
    fetcher = StubFetcher({"https://apps.example.com/x.png": (200, PNG)})
    store = StubStore()
    rehoster = AssetRehoster(fetcher, store)
    html = '<img src="/x.png"><img src="http://[broken/y.png">'

    out = rehoster.rehost_html(html, PAGE)

    assert 'src="https://cdn.test/items/x.png"' in out
    assert 'src="http://[broken/y.png"' in out
    assert len(store.uploads) == 1
    with pytest.raises(FetchError):
        rehoster.rehost_url("http://[broken/y.png", PAGE)
    assert rehoster.try_rehost_url("http://[broken/y.png", PAGE) == "http://[broken/y.png"
