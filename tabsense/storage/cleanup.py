"""
Orphan record cleanup.

Tabs closed without a removal event (browser crash, extension reload, service
downtime) leave records behind. The sweep compares stored keys with the live
tab set and deletes everything that is neither a live tab nor the credential.
The store outlives the process but the live set does not, so nothing is
swept until the extension has sent a full tab snapshot.

Usage:
    scheduler = CleanupScheduler(kv, host)
    scheduler.start()        # first sweep after CLEANUP_INITIAL_DELAY_SECONDS
    ...
    await scheduler.stop()
"""

from __future__ import annotations

import asyncio

from tabsense.config import (
    CLEANUP_INITIAL_DELAY_SECONDS,
    CLEANUP_INTERVAL_SECONDS,
    CREDENTIAL_KEY,
)
from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter, log_event
from tabsense.runtime.tab_host import TabHost
from tabsense.storage.kv import KeyValueStore

logger = get_logger(__name__)


async def sweep_orphans(kv: KeyValueStore, host: TabHost) -> list[str]:
    """
    Remove stored keys that belong to no open tab.

    Idempotent: with an unchanged live set, a second run removes nothing.
    Skipped (nothing removed) while the host has not reported its full tab
    list yet.

    Returns:
        The keys that were removed

    Side Effects:
        - Deletes keys from the key-value store
        - Logs cleanup statistics
    """
    if not host.synced:
        counter("cleanup.skipped_unsynced")
        logger.info("Live tab set not synced yet, skipping cleanup sweep")
        return []

    stored_keys = list((await kv.get_all()).keys())
    live_ids = {str(tab.id) for tab in await host.query_tabs()}

    orphans = [key for key in stored_keys if key != CREDENTIAL_KEY and key not in live_ids]
    if orphans:
        await kv.remove(orphans)
        counter("cleanup.removed", len(orphans))
        logger.info("Cleaned up %d orphaned storage entries", len(orphans))

    log_event("cleanup.sweep", stored=len(stored_keys), live=len(live_ids), removed=len(orphans))
    return orphans


class CleanupScheduler:
    """Runs sweep_orphans on a fixed interval in a background asyncio task."""

    def __init__(
        self,
        kv: KeyValueStore,
        host: TabHost,
        initial_delay: float = CLEANUP_INITIAL_DELAY_SECONDS,
        interval: float = CLEANUP_INTERVAL_SECONDS,
    ):
        self.kv = kv
        self.host = host
        self.initial_delay = initial_delay
        self.interval = interval
        self._task: asyncio.Task[None] | None = None

    @property
    def running(self) -> bool:
        return self._task is not None and not self._task.done()

    def start(self) -> None:
        if self.running:
            return
        self._task = asyncio.create_task(self._run(), name="tabsense-cleanup")
        logger.info(
            "Cleanup sweep scheduled (first run in %.0fs, then every %.0fs)",
            self.initial_delay,
            self.interval,
        )

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def run_once(self) -> list[str]:
        """One sweep; failures are logged and reported as no removals."""
        try:
            return await sweep_orphans(self.kv, self.host)
        except Exception as e:
            counter("cleanup.error")
            logger.error("Cleanup sweep failed: %s", e)
            return []

    async def _run(self) -> None:
        await asyncio.sleep(self.initial_delay)
        while True:
            await self.run_once()
            await asyncio.sleep(self.interval)
