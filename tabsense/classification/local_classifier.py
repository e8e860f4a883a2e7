"""
Local heuristic summarizer and topic guesser.

Used when the remote classifier is unavailable or returns garbage. Extractive
only: picks the two sentences that best overlap the page title and URL, and
takes the topic from URL keywords.

Pure function, no I/O, never raises.
"""

from __future__ import annotations

import re

from tabsense.classification.models import NO_CONTENT_SUMMARY, Classification
from tabsense.classification.topics import detect_topic_from_url
from tabsense.utils.urls import extract_url_keywords

SENTENCE_SPLIT_RE = re.compile(r"[.!?]+")
WORD_SPLIT_RE = re.compile(r"\W+", re.ASCII)

MIN_SENTENCE_CHARS = 20
MIN_TITLE_WORD_CHARS = 3
MAX_SCORED_SENTENCES = 10
SUMMARY_SENTENCES = 2

TITLE_KEYWORD_WEIGHT = 2.0
URL_KEYWORD_WEIGHT = 1.0
POSITION_WEIGHT = 0.1


def split_sentences(text: str) -> list[str]:
    """Fragments between sentence terminators, dropping short ones."""
    return [s for s in SENTENCE_SPLIT_RE.split(text or "") if len(s) > MIN_SENTENCE_CHARS]


def title_keywords(title: str | None) -> list[str]:
    words = WORD_SPLIT_RE.split((title or "").lower())
    return [w for w in words if len(w) > MIN_TITLE_WORD_CHARS]


def score_sentence(
    sentence: str,
    position: int,
    title_words: list[str],
    url_words: list[str],
) -> float:
    lowered = sentence.lower()
    score = 0.0
    for word in title_words:
        if word in lowered:
            score += TITLE_KEYWORD_WEIGHT
    for word in url_words:
        if word and word in lowered:
            score += URL_KEYWORD_WEIGHT
    score += (MAX_SCORED_SENTENCES - position) * POSITION_WEIGHT
    return score


def classify_locally(text: str | None, title: str | None, url: str | None) -> Classification:
    """
    Summarize and classify a page without network access.

    Args:
        text: Extracted page text (may be empty)
        title: Tab title
        url: Tab URL (malformed URLs are tolerated)

    Returns:
        Classification with a non-empty summary and a closed-set topic
    """
    topic = detect_topic_from_url(url)
    sentences = split_sentences(text or "")
    if not sentences:
        return Classification(summary=NO_CONTENT_SUMMARY, topic=topic)

    title_words = title_keywords(title)
    url_words = extract_url_keywords(url)

    scored = [
        (score_sentence(sentence, position, title_words, url_words), sentence.strip())
        for position, sentence in enumerate(sentences[:MAX_SCORED_SENTENCES])
    ]
    # sorted() is stable, so equal scores keep document order
    ranked = sorted(scored, key=lambda item: item[0], reverse=True)
    summary = ". ".join(sentence for _, sentence in ranked[:SUMMARY_SENTENCES])

    if not summary.strip(" ."):
        summary = NO_CONTENT_SUMMARY
    return Classification(summary=summary, topic=topic)
