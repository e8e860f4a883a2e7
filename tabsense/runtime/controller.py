"""
Tab event controller.

Turns host lifecycle events into classification cycles:

    tab-updated (complete, http/https, not busy) → guard.acquire
        → extractor.extract → orchestrator.process → guard.release

The guard is released in a ``finally`` on every path, including extractor
exceptions, so a tab can never get stuck in processing. A tab closed while
its cycle is in flight has its late record deleted again once the cycle
finishes.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Coroutine, Iterable
from dataclasses import dataclass
from enum import Enum
from typing import Any, Protocol

from tabsense.classification.orchestrator import ClassificationOrchestrator
from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter, log_event
from tabsense.runtime.guard import ProcessingGuard
from tabsense.runtime.tab_host import Tab
from tabsense.storage.models import TabRecord
from tabsense.storage.tab_records import TabRecordStore
from tabsense.utils.urls import is_processable_url

logger = get_logger(__name__)

STATUS_COMPLETE = "complete"


class TextExtractor(Protocol):
    async def extract(self, tab_id: int) -> str | None: ...


class CycleStatus(str, Enum):
    STORED = "stored"
    BUSY = "busy"
    NO_TEXT = "no_text"
    FAILED = "failed"
    DISCARDED = "discarded"  # tab closed before the cycle finished


@dataclass(frozen=True)
class CycleOutcome:
    status: CycleStatus
    record: TabRecord | None = None
    error: str | None = None

    @property
    def stored(self) -> bool:
        return self.status is CycleStatus.STORED


def should_process(status: str | None, tab: Tab) -> bool:
    """Event-level filter: load finished on a normal web page."""
    return status == STATUS_COMPLETE and is_processable_url(tab.url)


class TabEventController:
    """Reacts to tab lifecycle events; one instance per process."""

    def __init__(
        self,
        extractor: TextExtractor,
        orchestrator: ClassificationOrchestrator,
        store: TabRecordStore,
        guard: ProcessingGuard | None = None,
    ):
        self.extractor = extractor
        self.orchestrator = orchestrator
        self.store = store
        self.guard = guard if guard is not None else ProcessingGuard()
        self._tasks: set[asyncio.Task[Any]] = set()

    async def handle_tab_updated(self, status: str | None, tab: Tab) -> CycleOutcome | None:
        """
        React to a tab update event.

        Returns:
            The cycle outcome, or None if the event does not qualify
        """
        if not should_process(status, tab):
            return None
        if self.guard.is_processing(tab.id):
            counter("controller.skipped_busy")
            return CycleOutcome(CycleStatus.BUSY)
        return await self.run_cycle(tab)

    async def handle_tab_removed(self, tab_id: int) -> None:
        """
        Forget a closed tab: drop its guard entry and its stored record.

        Side Effects:
            - Evicts the tab from the guard
            - Removes the tab's record from the store
        """
        self.guard.evict(tab_id)
        await self.store.remove(tab_id)
        log_event("controller.tab_removed", tab_id=tab_id)

    async def run_cycle(self, tab: Tab) -> CycleOutcome:
        """One guarded extract + classify cycle for ``tab``."""
        token = self.guard.acquire(tab.id)
        if token is None:
            counter("controller.skipped_busy")
            return CycleOutcome(CycleStatus.BUSY)

        try:
            outcome = await self._extract_and_classify(tab)
        finally:
            still_open = self.guard.release(tab.id, token)

        if outcome.stored and not still_open:
            await self._discard_late_record(tab.id)
            return CycleOutcome(CycleStatus.DISCARDED, record=outcome.record)
        return outcome

    async def _extract_and_classify(self, tab: Tab) -> CycleOutcome:
        try:
            text = await self.extractor.extract(tab.id)
        except Exception as e:
            counter("controller.extraction_error")
            logger.error("Could not extract text from tab %s: %s", tab.id, e)
            return CycleOutcome(CycleStatus.FAILED, error="Could not extract text")

        if not text:
            counter("controller.no_text")
            logger.info("No text extracted from tab %s, skipping this cycle", tab.id)
            return CycleOutcome(CycleStatus.NO_TEXT, error="Could not extract text")

        try:
            record = await self.orchestrator.process(
                tab.id, text, tab.title, tab.fav_icon_url, tab.url
            )
        except Exception as e:
            counter("controller.process_error")
            logger.error("Error processing tab %s: %s", tab.id, e)
            return CycleOutcome(CycleStatus.FAILED, error="Processing failed")

        logger.info("Summary and topic stored for tab %s [%s]", tab.id, record.topic.value)
        return CycleOutcome(CycleStatus.STORED, record=record)

    async def _discard_late_record(self, tab_id: int) -> None:
        counter("controller.late_write_discarded")
        logger.info("Tab %s closed during processing, discarding its record", tab_id)
        try:
            await self.store.remove(tab_id)
        except Exception as e:
            logger.error("Failed to discard late record for tab %s: %s", tab_id, e)

    # ------------------------------------------------------------------
    # Background scheduling
    # ------------------------------------------------------------------

    def schedule(self, coro: Coroutine[Any, Any, Any]) -> asyncio.Task[Any]:
        """Run ``coro`` in the background, keeping a reference until it finishes."""
        task = asyncio.create_task(coro)
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)
        return task

    async def _delayed_update(self, tab: Tab, delay: float) -> None:
        if delay > 0:
            await asyncio.sleep(delay)
        await self.handle_tab_updated(STATUS_COMPLETE, tab)

    def process_existing_tabs(self, tabs: Iterable[Tab], stagger_max: float = 0.0) -> int:
        """
        Queue every already-loaded web tab (startup / install).

        Args:
            tabs: Current host tabs
            stagger_max: Upper bound of a random per-tab delay, seconds

        Returns:
            Number of tabs queued
        """
        queued = 0
        for tab in tabs:
            if not should_process(tab.status, tab):
                continue
            delay = random.uniform(0, stagger_max) if stagger_max > 0 else 0.0
            self.schedule(self._delayed_update(tab, delay))
            queued += 1
        logger.info("Queued %d existing tabs for processing", queued)
        return queued

    @property
    def pending(self) -> int:
        return len(self._tasks)

    async def drain(self) -> None:
        """Wait for all scheduled work (shutdown and tests)."""
        while self._tasks:
            await asyncio.gather(*list(self._tasks), return_exceptions=True)
