"""
Result types passed between the classifiers and the orchestrator.

The remote client never raises past its boundary; it returns either a
RemoteSuccess or a RemoteFailure carrying a FailureReason tag, and the
orchestrator's decision table consumes that union.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Union

from tabsense.classification.topics import Topic

NO_CONTENT_SUMMARY = "No content available for summary."
TOO_SHORT_SUMMARY = "Content too short for summarization"
MISSING_SUMMARY = "Unable to generate summary"
ANALYZING_SUMMARY = "Analyzing content..."

# Substrings that mark a summary as an error message rather than content
FAILURE_SENTINELS: tuple[str, ...] = ("Error:", "Network error")


class FailureReason(str, Enum):
    """Why the remote classifier produced no usable result."""

    MISSING_CREDENTIAL = "missing-credential"
    NETWORK = "network"
    HTTP_STATUS = "http-status"
    EMPTY_RESPONSE = "empty-response"
    MALFORMED_JSON = "malformed-json"


class Decider(str, Enum):
    """Which branch of the orchestrator produced a record."""

    REMOTE = "remote"
    LOCAL = "local"
    TOO_SHORT = "too_short"


@dataclass(frozen=True)
class Classification:
    """A summary plus a closed-set topic."""

    summary: str
    topic: Topic

    def has_failure_sentinel(self) -> bool:
        return any(sentinel in self.summary for sentinel in FAILURE_SENTINELS)


@dataclass(frozen=True)
class RemoteSuccess:
    classification: Classification


@dataclass(frozen=True)
class RemoteFailure:
    reason: FailureReason
    detail: str = ""

    @classmethod
    def missing_credential(cls) -> RemoteFailure:
        return cls(reason=FailureReason.MISSING_CREDENTIAL, detail="Gemini API key is not set")


RemoteResult = Union[RemoteSuccess, RemoteFailure]
