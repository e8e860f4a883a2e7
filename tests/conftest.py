"""
Pytest configuration for TabSense tests

Provides telemetry isolation and in-memory storage fixtures. Test doubles
live in fakes.py next to this file.
"""

from __future__ import annotations

import pytest
from fakes import ScriptedRemote, StaticExtractor

from tabsense.classification.models import RemoteFailure
from tabsense.classification.orchestrator import ClassificationOrchestrator
from tabsense.observability.telemetry import reset_telemetry
from tabsense.runtime.controller import TabEventController
from tabsense.runtime.guard import ProcessingGuard
from tabsense.runtime.tab_host import LiveTabRegistry
from tabsense.storage.kv import MemoryKeyValueStore
from tabsense.storage.tab_records import TabRecordStore


@pytest.fixture(autouse=True)
def _reset_telemetry():
    """Counters are module-global; every test starts from zero."""
    reset_telemetry()
    yield
    reset_telemetry()


@pytest.fixture
def kv() -> MemoryKeyValueStore:
    return MemoryKeyValueStore()


@pytest.fixture
def store(kv) -> TabRecordStore:
    return TabRecordStore(kv)


@pytest.fixture
def registry() -> LiveTabRegistry:
    return LiveTabRegistry()


@pytest.fixture
def guard() -> ProcessingGuard:
    return ProcessingGuard()


@pytest.fixture
def remote() -> ScriptedRemote:
    """Remote tier that always reports a missing key (forces local fallback)."""
    return ScriptedRemote(RemoteFailure.missing_credential())


@pytest.fixture
def extractor() -> StaticExtractor:
    return StaticExtractor()


@pytest.fixture
def orchestrator(store, remote) -> ClassificationOrchestrator:
    return ClassificationOrchestrator(store, remote)


@pytest.fixture
def controller(extractor, orchestrator, store, guard) -> TabEventController:
    return TabEventController(extractor, orchestrator, store, guard)
