"""
Tab record repository over a KeyValueStore.

Layout: every tab record lives under ``str(tab_id)``; the single reserved key
CREDENTIAL_KEY holds the Gemini API key string. Writes are whole-record
overwrites. The orchestrator and the cleanup sweep are the only writers.
"""

from __future__ import annotations

from typing import Any

from pydantic import ValidationError

from tabsense.config import CREDENTIAL_KEY
from tabsense.observability.logging import get_logger
from tabsense.storage.kv import KeyValueStore
from tabsense.storage.models import TabRecord

logger = get_logger(__name__)


def tab_key(tab_id: int) -> str:
    return str(tab_id)


def parse_tab_key(key: str) -> int | None:
    """Tab id for a store key, or None for the reserved/foreign keys."""
    if key == CREDENTIAL_KEY:
        return None
    try:
        return int(key)
    except ValueError:
        return None


class TabRecordStore:
    """Typed access to per-tab records and the stored credential."""

    def __init__(self, kv: KeyValueStore):
        self.kv = kv

    def _load(self, key: str, raw: Any) -> TabRecord | None:
        if not isinstance(raw, dict):
            logger.warning("Ignoring non-record value under key %s", key)
            return None
        try:
            return TabRecord.model_validate(raw)
        except ValidationError as e:
            logger.warning("Ignoring invalid tab record under key %s: %s", key, e.error_count())
            return None

    async def get(self, tab_id: int) -> TabRecord | None:
        key = tab_key(tab_id)
        raw = await self.kv.get(key)
        if raw is None:
            return None
        return self._load(key, raw)

    async def get_all(self) -> dict[int, TabRecord]:
        """Every valid tab record keyed by tab id (credential excluded)."""
        records: dict[int, TabRecord] = {}
        for key, raw in (await self.kv.get_all()).items():
            tab_id = parse_tab_key(key)
            if tab_id is None:
                continue
            record = self._load(key, raw)
            if record is not None:
                records[tab_id] = record
        return records

    async def set(self, tab_id: int, record: TabRecord) -> None:
        await self.kv.set(tab_key(tab_id), record.to_storage())

    async def remove(self, tab_id: int) -> bool:
        return await self.kv.remove(tab_key(tab_id)) > 0

    async def get_api_key(self) -> str | None:
        value = await self.kv.get(CREDENTIAL_KEY)
        return value if isinstance(value, str) and value else None

    async def set_api_key(self, api_key: str) -> None:
        await self.kv.set(CREDENTIAL_KEY, api_key)
        logger.info("Stored Gemini API key")
