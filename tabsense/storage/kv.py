"""
Key-value storage backends.

The pipeline only needs the subset of chrome.storage.local semantics it uses:
single-key get/set, read everything, remove one or many keys. Values are
JSON-serializable; there are no multi-key transactions.

Backends:
- MemoryKeyValueStore: process-local dict (tests, TABSENSE_DB_PATH=memory)
- SQLiteKeyValueStore: one ``kv_store`` table via aiosqlite
"""

from __future__ import annotations

import json
from collections.abc import Iterable
from datetime import UTC, datetime
from pathlib import Path
from typing import Any, Protocol

import aiosqlite

from tabsense.observability.logging import get_logger
from tabsense.observability.telemetry import counter

logger = get_logger(__name__)

MEMORY_DB = "memory"

KV_SCHEMA = """
CREATE TABLE IF NOT EXISTS kv_store (
    key TEXT PRIMARY KEY,
    value TEXT NOT NULL,
    updated_at TEXT NOT NULL
)
"""


class KeyValueStore(Protocol):
    async def get(self, key: str) -> Any | None: ...

    async def get_all(self) -> dict[str, Any]: ...

    async def set(self, key: str, value: Any) -> None: ...

    async def remove(self, keys: str | Iterable[str]) -> int: ...

    async def close(self) -> None: ...


def _as_key_list(keys: str | Iterable[str]) -> list[str]:
    if isinstance(keys, str):
        return [keys]
    return list(keys)


class MemoryKeyValueStore:
    """Dict-backed store. Values are round-tripped through JSON on write."""

    def __init__(self) -> None:
        self._data: dict[str, str] = {}

    async def get(self, key: str) -> Any | None:
        raw = self._data.get(key)
        return json.loads(raw) if raw is not None else None

    async def get_all(self) -> dict[str, Any]:
        return {key: json.loads(raw) for key, raw in self._data.items()}

    async def set(self, key: str, value: Any) -> None:
        self._data[key] = json.dumps(value)
        counter("storage.writes")

    async def remove(self, keys: str | Iterable[str]) -> int:
        removed = 0
        for key in _as_key_list(keys):
            if self._data.pop(key, None) is not None:
                removed += 1
        counter("storage.deletes", removed)
        return removed

    async def close(self) -> None:
        return None


class SQLiteKeyValueStore:
    """
    Durable store in a single SQLite file.

    The connection is opened lazily on first use and reused; aiosqlite runs
    each statement on its own worker thread so the event loop never blocks.
    """

    def __init__(self, db_path: str | Path):
        self.db_path = Path(db_path)
        self._conn: aiosqlite.Connection | None = None

    async def _connection(self) -> aiosqlite.Connection:
        if self._conn is None:
            self.db_path.parent.mkdir(parents=True, exist_ok=True)
            conn = await aiosqlite.connect(self.db_path)
            await conn.execute("PRAGMA journal_mode=WAL")
            await conn.execute(KV_SCHEMA)
            await conn.commit()
            self._conn = conn
            logger.info("Opened key-value store at %s", self.db_path)
        return self._conn

    async def get(self, key: str) -> Any | None:
        conn = await self._connection()
        async with conn.execute("SELECT value FROM kv_store WHERE key = ?", (key,)) as cursor:
            row = await cursor.fetchone()
        return json.loads(row[0]) if row else None

    async def get_all(self) -> dict[str, Any]:
        conn = await self._connection()
        async with conn.execute("SELECT key, value FROM kv_store") as cursor:
            rows = await cursor.fetchall()
        return {key: json.loads(value) for key, value in rows}

    async def set(self, key: str, value: Any) -> None:
        conn = await self._connection()
        await conn.execute(
            """
            INSERT INTO kv_store (key, value, updated_at) VALUES (?, ?, ?)
            ON CONFLICT(key) DO UPDATE SET value = excluded.value, updated_at = excluded.updated_at
            """,
            (key, json.dumps(value), datetime.now(UTC).isoformat()),
        )
        await conn.commit()
        counter("storage.writes")

    async def remove(self, keys: str | Iterable[str]) -> int:
        key_list = _as_key_list(keys)
        if not key_list:
            return 0
        conn = await self._connection()
        placeholders = ",".join("?" for _ in key_list)
        cursor = await conn.execute(
            f"DELETE FROM kv_store WHERE key IN ({placeholders})",  # noqa: S608
            key_list,
        )
        await conn.commit()
        counter("storage.deletes", cursor.rowcount)
        return cursor.rowcount

    async def close(self) -> None:
        if self._conn is not None:
            await self._conn.close()
            self._conn = None


def open_store(db_path: str) -> KeyValueStore:
    """Backend for a TABSENSE_DB_PATH value."""
    if db_path == MEMORY_DB:
        return MemoryKeyValueStore()
    return SQLiteKeyValueStore(db_path)
