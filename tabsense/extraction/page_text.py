"""Page text extraction from HTML snapshots.

Two strategies, tried in order:
1. readability-lxml isolates the main article, which is then flattened to text.
2. A best-effort grab: the first of <article>, <main>, a content container, or
   <body>, flattened to text.

Both results are whitespace-normalized and truncated to EXTRACTION_MAX_CHARS.
"""

from __future__ import annotations

import asyncio
import re

from bs4 import BeautifulSoup
from readability import Document

from tabsense.config import EXTRACTION_MAX_CHARS
from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter
from tabsense.runtime.tab_host import TabHost

logger = get_logger(__name__)

# Most specific first; body is the last resort
CONTENT_SELECTORS = (
    "article",
    "main",
    '.content, #content, [role="main"]',
    "body",
)

NON_CONTENT_TAGS = ["script", "style", "noscript", "template", "head"]


class ExtractionError(RuntimeError):
    """Raised when a strategy yields no text."""


def normalize_text(text: str) -> str:
    """Strip each line and collapse runs of blank lines."""
    lines = [line.strip() for line in text.splitlines()]
    text = "\n".join(lines)
    text = re.sub(r"\n{3,}", "\n\n", text)
    return text.strip()


def _soup_text(html: str) -> str:
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()
    return normalize_text(soup.get_text(separator="\n"))


def readability_text(html: str) -> str:
    """
    Main-article text via readability-lxml.

    Raises:
        ExtractionError: If readability finds no article text
    """
    try:
        article_html = Document(html).summary(html_partial=True)
    except Exception as e:
        raise ExtractionError(f"readability failed: {e}") from e

    text = _soup_text(article_html)
    if not text:
        raise ExtractionError("readability returned no text")
    return text


def fallback_text(html: str) -> str:
    """Text of the first matching content container (article → main → content → body)."""
    soup = BeautifulSoup(html, "html.parser")
    for tag in soup(NON_CONTENT_TAGS):
        tag.decompose()

    for selector in CONTENT_SELECTORS:
        node = soup.select_one(selector)
        if node is not None:
            return normalize_text(node.get_text(separator="\n"))

    return normalize_text(soup.get_text(separator="\n"))


def extract_text_from_html(html: str | None, max_chars: int = EXTRACTION_MAX_CHARS) -> str | None:
    """
    Readable text of a page, or None if there is nothing to read.

    Side Effects:
        - Increments extraction.* telemetry counters
    """
    if not html or not html.strip():
        return None

    try:
        text = readability_text(html)
        counter("extraction.readability")
    except ExtractionError as e:
        logger.debug("Readability failed, trying fallback: %s", e)
        text = fallback_text(html)
        counter("extraction.fallback")

    return text[:max_chars] or None


class PageTextExtractor:
    """
    Text extractor used by the event controller.

    Looks up the tab and its latest HTML snapshot on the host, then runs the
    parsing strategies on a worker thread.
    """

    def __init__(self, host: TabHost, max_chars: int = EXTRACTION_MAX_CHARS):
        self.host = host
        self.max_chars = max_chars

    async def extract(self, tab_id: int) -> str | None:
        """Text for ``tab_id``, or None when the tab or its page is unavailable."""
        tab = await self.host.get_tab(tab_id)
        if tab is None:
            return None

        html = await self.host.get_page_html(tab_id)
        if not html:
            logger.info("No page snapshot for tab %s", tab_id)
            return None

        text = await asyncio.to_thread(extract_text_from_html, html, self.max_chars)
        if text:
            logger.info("Extracted %d characters from tab %s", len(text), tab_id)
        return text
