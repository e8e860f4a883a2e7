"""
Per-tab classification orchestrator.

Implements the two-tier policy:
    too short → placeholder | Gemini → local fallback

The remote tier gives the best summaries but is unreliable (quota, network,
malformed output); the local tier always produces something, so ``process``
always ends with a full-overwrite write of a usable TabRecord.
"""

from __future__ import annotations

from typing import Protocol

from tabsense.classification.local_classifier import classify_locally
from tabsense.classification.models import (
    TOO_SHORT_SUMMARY,
    Classification,
    Decider,
    FailureReason,
    RemoteFailure,
    RemoteResult,
    RemoteSuccess,
)
from tabsense.classification.topics import detect_topic_from_url
from tabsense.config import PIPELINE_MIN_TEXT_CHARS
from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter, log_event
from tabsense.storage.models import TabRecord
from tabsense.storage.tab_records import TabRecordStore

logger = get_logger(__name__)


class RemoteClassifier(Protocol):
    async def classify(self, text: str, title: str, url: str) -> RemoteResult: ...


def is_too_short(text: str | None) -> bool:
    return not text or len(text.strip()) < PIPELINE_MIN_TEXT_CHARS


def too_short_classification(url: str | None) -> Classification:
    return Classification(summary=TOO_SHORT_SUMMARY, topic=detect_topic_from_url(url))


def choose_classification(
    remote_result: RemoteResult,
    text: str,
    title: str,
    url: str,
) -> tuple[Classification, Decider]:
    """
    Decision table for a page long enough to classify.

    | remote result                     | outcome |
    |-----------------------------------|---------|
    | RemoteSuccess, clean summary      | remote  |
    | RemoteSuccess, sentinel summary   | local   |
    | RemoteFailure (any reason)        | local   |
    """
    if isinstance(remote_result, RemoteSuccess):
        if not remote_result.classification.has_failure_sentinel():
            return remote_result.classification, Decider.REMOTE
        logger.info("Remote summary carries a failure sentinel, using local fallback")
    elif isinstance(remote_result, RemoteFailure):
        logger.info("Remote classifier unavailable (%s), using local fallback", remote_result.reason.value)

    return classify_locally(text, title, url), Decider.LOCAL


class ClassificationOrchestrator:
    """
    Classify one tab's text and persist the result.

    Example:
        >>> orchestrator = ClassificationOrchestrator(store, GeminiClient(store))
        >>> record = await orchestrator.process(42, text, "Title", None, "https://example.com")
        >>> record.topic in Topic
        True
    """

    def __init__(self, store: TabRecordStore, remote: RemoteClassifier):
        self.store = store
        self.remote = remote

    async def classify(
        self, text: str | None, title: str | None, url: str | None
    ) -> tuple[Classification, Decider]:
        """Pick a classification without writing anything. Never raises."""
        if is_too_short(text):
            return too_short_classification(url), Decider.TOO_SHORT

        title = title or ""
        url = url or ""
        try:
            remote_result = await self.remote.classify(text, title, url)
        except Exception as e:
            # The client contract says it never raises; recover anyway
            logger.error("Remote classifier raised unexpectedly: %s", e)
            counter("classification.remote_exception")
            remote_result = RemoteFailure(reason=FailureReason.NETWORK, detail=str(e))

        return choose_classification(remote_result, text, title, url)

    async def process(
        self,
        tab_id: int,
        text: str | None,
        title: str | None,
        fav_icon_url: str | None,
        url: str | None,
    ) -> TabRecord:
        """
        Classify a tab and overwrite its stored record.

        Args:
            tab_id: Host tab id (store key)
            text: Extracted page text, may be None
            title: Tab title
            fav_icon_url: Tab favicon URL, stored verbatim
            url: Tab URL

        Returns:
            The TabRecord that was written

        Side Effects:
            - May call the Gemini API
            - Overwrites the tab's entry in the record store
            - Increments classification.* telemetry counters
        """
        classification, decider = await self.classify(text, title, url)

        record = TabRecord.build(
            title=title,
            summary=classification.summary,
            topic=classification.topic,
            fav_icon_url=fav_icon_url,
            url=url,
        )
        try:
            await self.store.set(tab_id, record)
        except Exception as e:
            counter("classification.store_error")
            logger.error("Failed to store record for tab %s: %s", tab_id, e)
            return record

        counter(f"classification.{decider.value}")
        log_event(
            "classification.stored",
            tab_id=tab_id,
            topic=record.topic.value,
            decider=decider.value,
            domain=record.domain,
        )
        return record
