"""Unit tests for recovering classification JSON from Gemini output."""

import pytest

from tabsense.classification.models import MISSING_SUMMARY
from tabsense.classification.topics import Topic
from tabsense.llm.parsing import (
    MalformedResponseError,
    extract_json_object,
    parse_classification,
)


class TestExtractJsonObject:
    def test_bare_object(self):
        assert extract_json_object('{"summary": "s", "topic": "news"}') == {
            "summary": "s",
            "topic": "news",
        }

    def test_object_embedded_in_prose(self):
        text = 'Sure! {"summary": "s", "topic": "news"} Hope that helps.'
        assert extract_json_object(text)["topic"] == "news"

    def test_fenced_block_after_greedy_span_fails(self):
        """Stray braces in the prose break the greedy span; the fence still parses."""
        text = (
            "Use {placeholders} like this.\n"
            '```json\n{"summary": "A trip planner.", "topic": "travel"}\n```\n'
            "Trailing note with a } brace."
        )
        assert extract_json_object(text)["topic"] == "travel"

    def test_nested_objects_kept_intact(self):
        text = '{"summary": "s", "topic": "news", "meta": {"confidence": 0.9}}'
        assert extract_json_object(text)["meta"] == {"confidence": 0.9}

    @pytest.mark.parametrize(
        "text",
        ["", "no json here", "{not: valid}", '```json\n["a", "b"]\n```', "[1, 2, 3]"],
    )
    def test_unrecoverable_raises(self, text):
        with pytest.raises(MalformedResponseError):
            extract_json_object(text)


class TestParseClassification:
    def test_fenced_response_with_uppercase_topic(self):
        text = 'Here is the result:\n```json\n{"summary":"S.","topic":"NEWS"}\n```'
        result = parse_classification(text)
        assert result.summary == "S."
        assert result.topic is Topic.NEWS

    def test_unknown_topic_becomes_other(self):
        result = parse_classification('{"summary": "A game.", "topic": "gaming"}')
        assert result.topic is Topic.OTHER

    def test_missing_fields_get_defaults(self):
        result = parse_classification("{}")
        assert result.summary == MISSING_SUMMARY
        assert result.topic is Topic.OTHER

    def test_blank_summary_gets_placeholder(self):
        result = parse_classification('{"summary": "   ", "topic": "news"}')
        assert result.summary == MISSING_SUMMARY

    def test_extra_fields_ignored(self):
        result = parse_classification('{"summary": "S.", "topic": "finance", "confidence": 1}')
        assert result.topic is Topic.FINANCE

    def test_non_string_summary_is_malformed(self):
        with pytest.raises(MalformedResponseError):
            parse_classification('{"summary": ["a", "b"], "topic": "news"}')
