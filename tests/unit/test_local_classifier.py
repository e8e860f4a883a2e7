"""Tests for the local extractive summarizer."""

from tabsense.classification.local_classifier import (
    classify_locally,
    score_sentence,
    split_sentences,
    title_keywords,
)
from tabsense.classification.models import NO_CONTENT_SUMMARY
from tabsense.classification.topics import Topic

TITLE = "Python language guide"
URL = "https://docs.python.org/3/tutorial"


def test_split_drops_short_fragments():
    text = "Too short. This sentence is comfortably long enough! Tiny? Another sentence that survives the filter."
    assert [s.strip() for s in split_sentences(text)] == [
        "This sentence is comfortably long enough",
        "Another sentence that survives the filter",
    ]


def test_title_keywords_keep_words_longer_than_three():
    assert title_keywords("The Go FAQ: language basics") == ["language", "basics"]
    assert title_keywords(None) == []


def test_score_combines_title_url_and_position():
    score = score_sentence("python docs for everyone", 0, ["python"], ["docs", "tutorial"])
    assert score == 2.0 + 1.0 + 1.0


def test_top_two_sentences_in_score_order():
    text = (
        "Python is a programming language that lets you work quickly. "
        "Many people enjoy reading about unrelated subjects. "
        "The weather today is sunny and quite warm outside."
    )
    result = classify_locally(text, TITLE, URL)

    assert result.topic is Topic.PRODUCTIVITY
    assert result.summary == (
        "Python is a programming language that lets you work quickly. "
        "Many people enjoy reading about unrelated subjects"
    )


def test_keyword_match_outranks_position():
    text = (
        "Python is a programming language that lets you work quickly. "
        "Many people enjoy reading about unrelated subjects. "
        "This guide walks through every feature step by step."
    )
    result = classify_locally(text, TITLE, URL)

    assert result.summary == (
        "Python is a programming language that lets you work quickly. "
        "This guide walks through every feature step by step"
    )


def test_no_usable_sentences_gives_placeholder():
    result = classify_locally("Short. Also short.", TITLE, URL)
    assert result.summary == NO_CONTENT_SUMMARY
    assert result.topic is Topic.PRODUCTIVITY


def test_empty_inputs_never_raise():
    result = classify_locally("", None, None)
    assert result.summary == NO_CONTENT_SUMMARY
    assert result.topic is Topic.OTHER


def test_malformed_url_tolerated():
    text = "A perfectly reasonable sentence about nothing in particular."
    result = classify_locally(text, "Title here", "::not a url::")
    assert result.topic is Topic.OTHER
    assert result.summary == "A perfectly reasonable sentence about nothing in particular"
