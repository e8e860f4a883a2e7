"""Tests for the key-value backends (in-memory and aiosqlite)."""

import pytest

from tabsense.observability.telemetry import get_counter
from tabsense.storage.kv import MemoryKeyValueStore, SQLiteKeyValueStore, open_store


@pytest.fixture(params=["memory", "sqlite"])
def backend(request, tmp_path):
    if request.param == "memory":
        return MemoryKeyValueStore()
    return SQLiteKeyValueStore(tmp_path / "kv" / "tabsense.db")


class TestKeyValueStore:
    @pytest.mark.asyncio
    async def test_get_missing_is_none(self, backend):
        assert await backend.get("nope") is None
        await backend.close()

    @pytest.mark.asyncio
    async def test_set_overwrites(self, backend):
        await backend.set("1", {"summary": "a"})
        await backend.set("1", {"summary": "b"})

        assert await backend.get("1") == {"summary": "b"}
        assert await backend.get_all() == {"1": {"summary": "b"}}
        await backend.close()

    @pytest.mark.asyncio
    async def test_remove_single_and_many(self, backend):
        for key in ("1", "2", "3"):
            await backend.set(key, key)

        assert await backend.remove("1") == 1
        assert await backend.remove(["2", "3", "missing"]) == 2
        assert await backend.remove([]) == 0
        assert await backend.get_all() == {}
        await backend.close()

    @pytest.mark.asyncio
    async def test_counts_writes_and_deletes(self, backend):
        await backend.set("1", {"summary": "a"})
        await backend.set("2", {"summary": "b"})
        await backend.remove(["1", "2", "missing"])

        assert get_counter("storage.writes") == 2
        assert get_counter("storage.deletes") == 2
        await backend.close()

    @pytest.mark.asyncio
    async def test_string_values(self, backend):
        await backend.set("geminiApiKey", "secret")
        assert await backend.get("geminiApiKey") == "secret"
        await backend.close()


@pytest.mark.asyncio
async def test_sqlite_persists_across_connections(tmp_path):
    path = tmp_path / "tabsense.db"
    first = SQLiteKeyValueStore(path)
    await first.set("42", {"topic": "news"})
    await first.close()

    second = SQLiteKeyValueStore(path)
    assert await second.get("42") == {"topic": "news"}
    await second.close()


def test_open_store_memory_keyword(tmp_path):
    assert isinstance(open_store("memory"), MemoryKeyValueStore)
    assert isinstance(open_store(str(tmp_path / "x.db")), SQLiteKeyValueStore)
