"""Tests for HTML text extraction (readability-lxml with a BeautifulSoup fallback)."""

import pytest
from fakes import ARTICLE_HTML, make_tab

from tabsense.extraction.page_text import (
    ExtractionError,
    PageTextExtractor,
    extract_text_from_html,
    fallback_text,
    normalize_text,
    readability_text,
)
from tabsense.observability.telemetry import get_counter


def test_normalize_text_collapses_blank_runs():
    assert normalize_text("  a  \n\n\n\n  b \n") == "a\n\nb"


class TestReadability:
    def test_article_text_without_scripts(self):
        text = readability_text(ARTICLE_HTML)
        assert "Ownership is the set of rules" in text
        assert "borrow checker" in text
        assert "var tracking" not in text

    def test_empty_document_raises(self):
        with pytest.raises(ExtractionError):
            readability_text("<html><body></body></html>")


class TestFallback:
    def test_prefers_article(self):
        html = "<body><nav>Menu</nav><article><p>Story body</p></article></body>"
        assert fallback_text(html) == "Story body"

    def test_main_before_content_container(self):
        html = '<body><div id="content">Secondary</div><main>Primary</main></body>'
        assert fallback_text(html) == "Primary"

    def test_content_container(self):
        html = '<body><div>Chrome</div><div class="content">Body copy</div></body>'
        assert fallback_text(html) == "Body copy"

    def test_body_last_resort_strips_scripts(self):
        html = "<body><script>alert(1)</script><p>Just text</p></body>"
        assert fallback_text(html) == "Just text"


class TestExtractTextFromHtml:
    @pytest.mark.parametrize("html", [None, "", "   "])
    def test_nothing_to_read(self, html):
        assert extract_text_from_html(html) is None

    def test_empty_page_is_none(self):
        assert extract_text_from_html("<html><body></body></html>") is None

    def test_truncates(self):
        text = extract_text_from_html(ARTICLE_HTML, max_chars=50)
        assert text is not None
        assert len(text) == 50

    def test_counts_strategy(self):
        extract_text_from_html(ARTICLE_HTML)
        assert get_counter("extraction.readability") == 1


class TestPageTextExtractor:
    @pytest.mark.asyncio
    async def test_reads_latest_snapshot(self, registry):
        registry.upsert(make_tab(1), html=ARTICLE_HTML)
        text = await PageTextExtractor(registry).extract(1)
        assert "Ownership is the set of rules" in text

    @pytest.mark.asyncio
    async def test_unknown_tab(self, registry):
        assert await PageTextExtractor(registry).extract(99) is None

    @pytest.mark.asyncio
    async def test_tab_without_snapshot(self, registry):
        registry.upsert(make_tab(2))
        assert await PageTextExtractor(registry).extract(2) is None
