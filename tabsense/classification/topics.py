"""
Topic taxonomy for tab grouping.

The set is closed: anything the LLM or a caller produces that is not a member
collapses to Topic.OTHER. URL_TOPIC_RULES is ordered; the first rule whose
keyword appears in the URL wins.
"""

from __future__ import annotations

from enum import Enum


class Topic(str, Enum):
    """Closed set of tab topics."""

    DEVELOPMENT = "development"
    RESEARCH = "research"
    SOCIAL = "social"
    ENTERTAINMENT = "entertainment"
    NEWS = "news"
    SHOPPING = "shopping"
    PRODUCTIVITY = "productivity"
    HEALTH = "health"
    FINANCE = "finance"
    TRAVEL = "travel"
    OTHER = "other"


# Priority order matters: "github.com/news" is development, not news
URL_TOPIC_RULES: tuple[tuple[str, Topic], ...] = (
    ("github", Topic.DEVELOPMENT),
    ("stackoverflow", Topic.DEVELOPMENT),
    ("dev", Topic.DEVELOPMENT),
    ("youtube", Topic.ENTERTAINMENT),
    ("netflix", Topic.ENTERTAINMENT),
    ("spotify", Topic.ENTERTAINMENT),
    ("twitter", Topic.SOCIAL),
    ("facebook", Topic.SOCIAL),
    ("reddit", Topic.SOCIAL),
    ("amazon", Topic.SHOPPING),
    ("shop", Topic.SHOPPING),
    ("ebay", Topic.SHOPPING),
    ("news", Topic.NEWS),
    ("cnn", Topic.NEWS),
    ("bbc", Topic.NEWS),
    ("gmail", Topic.PRODUCTIVITY),
    ("docs", Topic.PRODUCTIVITY),
    ("notion", Topic.PRODUCTIVITY),
    ("health", Topic.HEALTH),
    ("fitness", Topic.HEALTH),
    ("medical", Topic.HEALTH),
    ("finance", Topic.FINANCE),
    ("bank", Topic.FINANCE),
    ("invest", Topic.FINANCE),
    ("travel", Topic.TRAVEL),
    ("hotel", Topic.TRAVEL),
    ("flight", Topic.TRAVEL),
)


def validate_topic(value: object) -> Topic:
    """Map a free-form topic label onto the closed set.

    Matching is case-insensitive after trimming; None, non-strings and unknown
    labels ("Gaming", "") all become Topic.OTHER.
    """
    if isinstance(value, Topic):
        return value
    if not isinstance(value, str):
        return Topic.OTHER
    try:
        return Topic(value.strip().lower())
    except ValueError:
        return Topic.OTHER


def detect_topic_from_url(url: str | None) -> Topic:
    """Guess a topic from URL keywords alone."""
    url_lower = (url or "").lower()
    for keyword, topic in URL_TOPIC_RULES:
        if keyword in url_lower:
            return topic
    return Topic.OTHER
