"""
Process-scoped service graph.

Everything with state (store connection, live tab registry, guard, HTTP
client, cleanup task) is created once here and torn down in ``aclose``.
"""

from __future__ import annotations

from dataclasses import dataclass

import httpx

from tabsense.classification.orchestrator import ClassificationOrchestrator
from tabsense.config import CLEANUP_INITIAL_DELAY_SECONDS, CLEANUP_INTERVAL_SECONDS, DB_PATH
from tabsense.extraction.page_text import PageTextExtractor
from tabsense.llm.gemini import GeminiClient
from tabsense.observability.logging import get_logger
from tabsense.runtime.commands import TabCommands
from tabsense.runtime.controller import TabEventController
from tabsense.runtime.guard import ProcessingGuard
from tabsense.runtime.tab_host import LiveTabRegistry
from tabsense.storage.cleanup import CleanupScheduler
from tabsense.storage.kv import KeyValueStore, open_store
from tabsense.storage.tab_records import TabRecordStore

logger = get_logger(__name__)


@dataclass
class Services:
    kv: KeyValueStore
    store: TabRecordStore
    registry: LiveTabRegistry
    guard: ProcessingGuard
    gemini: GeminiClient
    orchestrator: ClassificationOrchestrator
    extractor: PageTextExtractor
    controller: TabEventController
    commands: TabCommands
    cleanup: CleanupScheduler

    async def aclose(self) -> None:
        """Stop the sweep, wait for in-flight cycles, close clients and storage."""
        await self.cleanup.stop()
        await self.controller.drain()
        await self.gemini.aclose()
        await self.kv.close()
        logger.info("Services shut down")


def build_services(
    db_path: str = DB_PATH,
    kv: KeyValueStore | None = None,
    http_client: httpx.AsyncClient | None = None,
    cleanup_initial_delay: float = CLEANUP_INITIAL_DELAY_SECONDS,
    cleanup_interval: float = CLEANUP_INTERVAL_SECONDS,
) -> Services:
    """Wire the pipeline. ``kv`` and ``http_client`` are injectable for tests."""
    kv = kv if kv is not None else open_store(db_path)
    store = TabRecordStore(kv)
    registry = LiveTabRegistry()
    guard = ProcessingGuard()
    gemini = GeminiClient(credentials=store, http_client=http_client)
    orchestrator = ClassificationOrchestrator(store, gemini)
    extractor = PageTextExtractor(registry)
    controller = TabEventController(extractor, orchestrator, store, guard)
    commands = TabCommands(registry, store, controller)
    cleanup = CleanupScheduler(
        kv, registry, initial_delay=cleanup_initial_delay, interval=cleanup_interval
    )
    return Services(
        kv=kv,
        store=store,
        registry=registry,
        guard=guard,
        gemini=gemini,
        orchestrator=orchestrator,
        extractor=extractor,
        controller=controller,
        commands=commands,
        cleanup=cleanup,
    )
