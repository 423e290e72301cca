"""
Anchor insertion into item body HTML.

Links are spliced into the HTML string directly rather than through a
parser round-trip, so untouched markup is preserved byte-for-byte. The
placement search never picks an offset inside a tag or inside an open
<a>...</a> span.
"""

from __future__ import annotations

from dataclasses import dataclass
import html as html_lib
import re
from typing import Iterable

from ..core.keywords import TITLE_STOPWORDS, title_keywords
from ..core.text import strip_html_tags
from ..core.types import LinkInsertionResult, LinkTarget

_OPEN_ANCHOR_RE = re.compile(r"<a(?:\s[^>]*)?>", re.I)
_CLOSE_ANCHOR_RE = re.compile(r"</a\s*>", re.I)
# A <p> whose content holds no nested <p> and no <a>
_PLAIN_PARAGRAPH_RE = re.compile(r"<p(?:\s[^>]*)?>(?:(?!<(?:/?p\b|a\b)).)*?</p>", re.I | re.S)
_ANCHOR_RE = re.compile(
    r"<a(?:\s[^>]*?)?\shref\s*=\s*([\"'])(?P<href>.*?)\1[^>]*>(?P<inner>.*?)</a\s*>",
    re.I | re.S,
)
_EXTERNAL_SCHEME_RE = re.compile(r"^\s*(?:https?://|mailto:|tel:)", re.I)


@dataclass(frozen=True)
class LinkInserter:
    """Inserts, lists and filters item links in HTML bodies.

    Attributes:
        path_prefix: Path prefix of internal item links ("/item/")
        keyword_limit: Maximum title keywords tried for placement
        anchor_window: Characters scanned backwards for an unclosed <a>
        title_stopwords: Words never used as placement keywords
    """

    path_prefix: str = "/item/"
    keyword_limit: int = 5
    anchor_window: int = 1000
    title_stopwords: frozenset[str] = TITLE_STOPWORDS

    def href_for(self, slug: str) -> str:
        return f"{self.path_prefix}{slug}"

    def has_link(self, html: str, slug: str) -> bool:
        href = self.href_for(slug)
        # Inserted anchors carry the escaped href; hand-written ones may not
        forms = {re.escape(href), re.escape(html_lib.escape(href))}
        pattern = re.compile(
            r"<a(?:\s[^>]*?)?\shref\s*=\s*[\"'](?:" + "|".join(sorted(forms)) + r")[\"']", re.I
        )
        return pattern.search(html) is not None

    def insert_link(
        self,
        html: str,
        target_slug: str,
        target_title: str,
        anchor_text: str | None = None,
    ) -> str:
        """Insert one anchor to `target_slug`, or return `html` unchanged.

        Unchanged means: the link already exists, or the body has no
        keyword match and no paragraph to attach to.
        """
        if self.has_link(html, target_slug):
            return html

        position = self._keyword_position(html, target_title)
        if position is None:
            position = self._paragraph_position(html)
        if position is None:
            return html

        link_html = self._link_html(target_slug, target_title, anchor_text or target_title)
        return html[:position] + link_html + html[position:]

    def insert_many(self, html: str, targets: Iterable[LinkTarget]) -> LinkInsertionResult:
        """Insert several links, longest titles first."""
        updated = html
        inserted = 0
        for target in sorted(targets, key=lambda t: len(t.title), reverse=True):
            before = updated
            updated = self.insert_link(updated, target.slug, target.title, target.anchor_text)
            if updated != before:
                inserted += 1
        return LinkInsertionResult(updated_html=updated, links_inserted=inserted)

    def strip_external_links(self, html: str) -> str:
        """Replace anchors pointing off-site with their plain visible text."""

        def replace(match: re.Match[str]) -> str:
            href = match.group("href").strip()
            if href.startswith(self.path_prefix) or not _EXTERNAL_SCHEME_RE.match(href):
                return match.group(0)
            return strip_html_tags(match.group("inner"))

        return _ANCHOR_RE.sub(replace, html)

    def extract_existing_links(self, html: str) -> list[LinkTarget]:
        """List internal item links already present in `html`."""
        links: list[LinkTarget] = []
        for match in _ANCHOR_RE.finditer(html):
            href = html_lib.unescape(match.group("href").strip())
            if not href.startswith(self.path_prefix):
                continue
            slug = href[len(self.path_prefix):].split("#")[0].split("?")[0].strip("/")
            if not slug:
                continue
            text = strip_html_tags(match.group("inner"))
            links.append(LinkTarget(slug=slug, title=text, anchor_text=text))
        return links

    def is_inside_tag(self, html: str, position: int) -> bool:
        """True if `position` falls inside a tag or inside an open anchor."""
        before = html[:position]
        if before.rfind("<") > before.rfind(">"):
            return True
        window = html[max(0, position - self.anchor_window):position]
        return len(_OPEN_ANCHOR_RE.findall(window)) > len(_CLOSE_ANCHOR_RE.findall(window))

    def _keyword_position(self, html: str, title: str) -> int | None:
        best_position: int | None = None
        best_score = float("-inf")
        length = max(len(html), 1)
        for keyword in title_keywords(title, self.keyword_limit, self.title_stopwords):
            pattern = re.compile(r"\b" + re.escape(keyword) + r"\b", re.I)
            for match in pattern.finditer(html):
                position = match.start()
                if self.is_inside_tag(html, position):
                    continue
                # Longer keywords win; earlier offsets break ties
                score = len(keyword) * 1000 - (position / length) * 100
                if score > best_score:
                    best_score = score
                    best_position = _word_start(html, position)
        return best_position

    def _paragraph_position(self, html: str) -> int | None:
        for match in _PLAIN_PARAGRAPH_RE.finditer(html):
            position = match.end() - len("</p>")
            if not self.is_inside_tag(html, position):
                return position
        first_close = html.lower().find("</p>")
        if first_close == -1:
            return None
        position = first_close + len("</p>")
        if self.is_inside_tag(html, position):
            return None
        return position

    def _link_html(self, slug: str, title: str, anchor_text: str) -> str:
        return (
            f' <a href="{html_lib.escape(self.href_for(slug))}" '
            f'title="{html_lib.escape(title)}">{html_lib.escape(anchor_text, quote=False)}</a> '
        )


def _word_start(html: str, position: int) -> int:
    """Walk back from `position` to the start of the surrounding word."""
    start = position
    while start > 0:
        char = html[start - 1]
        if char in "<>" or char.isspace():
            break
        start -= 1
    return start
