"""Tests for InMemoryKeyValueStore."""

import pytest

from infrastructure.persistence import InMemoryKeyValueStore


@pytest.mark.unit
class TestInMemoryKeyValueStore:
    def test_get_missing_key_returns_none(self, memory_store):
        assert memory_store.get("device:missing") is None

    def test_put_then_get(self, memory_store):
        memory_store.put("device:1", {"enabled": True})
        assert memory_store.get("device:1") == {"enabled": True}

    def test_put_overwrites(self, memory_store):
        memory_store.put("device:1", {"enabled": True})
        memory_store.put("device:1", {"enabled": False})
        assert memory_store.get("device:1") == {"enabled": False}
        assert len(memory_store) == 1

    def test_delete_is_idempotent(self, memory_store):
        memory_store.put("device:1", {"enabled": True})
        memory_store.delete("device:1")
        memory_store.delete("device:1")
        assert memory_store.get("device:1") is None
        assert len(memory_store) == 0

    def test_stored_items_are_copies(self):
        store = InMemoryKeyValueStore()
        item = {"tags": ["a"]}
        store.put("k", item)
        item["tags"].append("b")

        fetched = store.get("k")
        fetched["tags"].append("c")

        assert store.get("k") == {"tags": ["a"]}

    def test_scan_tolerates_writes_during_iteration(self, memory_store):
        memory_store.put("a", {"n": 1})
        memory_store.put("b", {"n": 2})

        seen = []
        for key, item in memory_store.scan():
            seen.append((key, item))
            memory_store.delete(key)

        assert sorted(seen) == [("a", {"n": 1}), ("b", {"n": 2})]
        assert len(memory_store) == 0
