import pytest

from apkfeed.core.errors import FetchError
from apkfeed.crawl.discovery import (
    LinkDiscoveryCrawler,
    extract_candidate_links,
    is_candidate_link,
    is_listing_url,
    page_url,
)
from apkfeed.fetch.fetcher import FetchResult

SEED = "https://x.test/category/games/"

PAGE_1 = (
    '<nav><a href="/about-us">About</a><a href="/category/news/">News</a></nav>'
    '<article><h2><a href="/app/turbo-racer/">Turbo Racer</a></h2></article>'
    '<article><a href="https://x.test/app/sky-jump">Sky Jump</a>'
    '<a href="https://other.test/app/x">Elsewhere</a></article>'
)
PAGE_2 = (
    '<article><a href="/app/farm-story/">Farm Story</a></article>'
    '<article><a href="/app/turbo-racer/">Turbo Racer</a></article>'
)


class StubFetcher:
    """Serves canned listing pages; unknown URLs return 404."""

    def __init__(self, pages):
        self.pages = pages
        self.calls = []

    def fetch(self, url):
        self.calls.append(url)
        if url not in self.pages:
            return FetchResult(url=url, status_code=404, text=None, error="HTTP 404")
        return FetchResult(url=url, status_code=200, text=self.pages[url], error=None)


class RecordingGate:
    def __init__(self):
        self.keys = []

    def wait(self, key):
        self.keys.append(key)


def test_single_item_seed_needs_no_fetch():
    fetcher = StubFetcher({})
    crawler = LinkDiscoveryCrawler(fetcher)

    assert crawler.discover("https://x.test/app/cool-app") == ["https://x.test/app/cool-app"]
    assert crawler.discover("https://x.test/app/cool-app/") == ["https://x.test/app/cool-app"]
    assert fetcher.calls == []


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://x.test/category/games/", True),
        ("https://x.test/tag/racing", True),
        ("https://x.test/games/page/2/", True),
        ("https://x.test/archive/2/", True),
        ("https://x.test/app/cool-app/", False),
    ],
)
def test_is_listing_url(url, expected):
    assert is_listing_url(url) is expected


@pytest.mark.parametrize(
    "seed,page,expected",
    [
        (SEED, 1, SEED),
        (SEED, 3, "https://x.test/category/games/page/3/"),
        ("https://x.test/category/games/page/2/", 3, "https://x.test/category/games/page/3/"),
        ("https://x.test/list?cat=games", 2, "https://x.test/list?cat=games&page=2"),
    ],
)
def test_page_url(seed, page, expected):
    assert page_url(seed, page) == expected


@pytest.mark.parametrize(
    "url,expected",
    [
        ("https://x.test/app/cool", True),
        ("https://x.test/about", True),
        ("https://other.test/app/cool", False),
        ("https://x.test/app/cool#reviews", False),
        ("https://x.test/category/news", False),
        ("https://x.test/author/bob", False),
        ("https://x.test/feed", False),
        ("https://x.test/2024/05", False),
        ("https://x.test/", False),
        ("mailto:hi@x.test", False),
        ("https://x.test/category/games", False),
    ],
)
def test_is_candidate_link(url, expected):
    assert is_candidate_link(url, SEED) is expected


def test_extract_prefers_article_links():
    links = extract_candidate_links(PAGE_1, SEED, SEED)

    assert links == ["https://x.test/app/turbo-racer", "https://x.test/app/sky-jump"]


def test_extract_falls_back_to_all_anchors():
    html = '<div><a href="/app/one/">One</a><a href="/app/one">Again</a><a href="#top">Top</a></div>'

    assert extract_candidate_links(html, SEED, SEED) == ["https://x.test/app/one"]


def test_discover_skips_malformed_hrefs():
    html = '<article><a href="/app/good-one/">Good</a></article><article><a href="http://[broken/x">Bad</a></article>'
    crawler = LinkDiscoveryCrawler(StubFetcher({SEED: html}))

    assert crawler.discover(SEED, max_pages=1) == ["https://x.test/app/good-one"]


def test_discover_stops_when_a_page_adds_nothing():
    fetcher = StubFetcher({SEED: PAGE_1, page_url(SEED, 2): PAGE_1})
    crawler = LinkDiscoveryCrawler(fetcher, max_pages=5)

    links = crawler.discover(SEED)

    assert links == ["https://x.test/app/turbo-racer", "https://x.test/app/sky-jump"]
    assert len(fetcher.calls) == 2


def test_discover_walks_pages_and_deduplicates():
    fetcher = StubFetcher({SEED: PAGE_1, page_url(SEED, 2): PAGE_2, page_url(SEED, 3): PAGE_2})
    gate = RecordingGate()
    crawler = LinkDiscoveryCrawler(fetcher, politeness=gate)

    links = crawler.discover(SEED, max_pages=5)

    assert links == [
        "https://x.test/app/turbo-racer",
        "https://x.test/app/sky-jump",
        "https://x.test/app/farm-story",
    ]
    assert len(fetcher.calls) == 3
    assert gate.keys == ["x.test"] * 3


def test_discover_respects_max_pages():
    fetcher = StubFetcher({SEED: PAGE_1, page_url(SEED, 2): PAGE_2})
    crawler = LinkDiscoveryCrawler(fetcher)

    links = crawler.discover(SEED, max_pages=1)

    assert len(links) == 2
    assert fetcher.calls == [SEED]


def test_discover_stops_on_later_page_failure():
    fetcher = StubFetcher({SEED: PAGE_1, page_url(SEED, 2): PAGE_2})
    crawler = LinkDiscoveryCrawler(fetcher)

    links = crawler.discover(SEED, max_pages=5)

    assert len(links) == 3
    assert fetcher.calls[-1] == page_url(SEED, 3)


def test_discover_raises_when_first_page_fails():
    crawler = LinkDiscoveryCrawler(StubFetcher({}))

    with pytest.raises(FetchError):
        crawler.discover(SEED)
