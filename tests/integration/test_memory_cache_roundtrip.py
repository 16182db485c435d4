"""End-to-end tests of DocumentStoreCacheProvider over InMemoryDocumentStore.

No mocks: every call goes through the real adapter, the real serializer and
a real (process-local) document store, with a fake clock driving TTLs.
"""

from __future__ import annotations

import datetime

import pytest

from docstore_cache.providers.cache.document_store_cache import DocumentStoreCacheProvider
from docstore_cache.providers.document_store.memory_store import InMemoryDocumentStore
from docstore_cache.utils.errors import ConfigurationError
from tests.conftest import INDEX_NAME, FakeClock


def test_save_update_delete_scenario(memory_cache: DocumentStoreCacheProvider) -> None:
    assert memory_cache.save(1, "foobar") is True
    assert memory_cache.fetch(1) == "foobar"

    assert memory_cache.save(1, "baz") is True
    assert memory_cache.fetch(1) == "baz"

    assert memory_cache.delete(1) is True
    assert memory_cache.fetch(1) is None
    assert memory_cache.contains(1) is False


class TestReadsAndWrites:
    def test_absent_key_is_a_miss(self, memory_cache: DocumentStoreCacheProvider) -> None:
        assert memory_cache.fetch("never-saved") is None
        assert memory_cache.fetch("never-saved", default="fallback") == "fallback"
        assert memory_cache.contains("never-saved") is False

    @pytest.mark.parametrize(
        "payload",
        [
            "Carl Cox",
            0,
            3.5,
            False,
            None,
            ["Jeff Mills", "Robert Hood"],
            {"venue": "Tresor", "year": 1997, "lineup": ["Carl Cox"]},
        ],
    )
    def test_saved_payload_is_readable_immediately(
        self, memory_cache: DocumentStoreCacheProvider, payload: object
    ) -> None:
        assert memory_cache.save("k", payload) is True
        assert memory_cache.contains("k") is True
        assert memory_cache.fetch("k", default="miss") == payload

    def test_second_save_replaces_value(self, memory_cache: DocumentStoreCacheProvider) -> None:
        memory_cache.save("k", {"a": 1, "b": 2})
        memory_cache.save("k", {"c": 3})
        assert memory_cache.fetch("k") == {"c": 3}

    def test_delete_absent_key_returns_false(self, memory_cache: DocumentStoreCacheProvider) -> None:
        assert memory_cache.delete("absent") is False

    def test_unserializable_payload_fails_save(self, memory_cache: DocumentStoreCacheProvider) -> None:
        assert memory_cache.save("k", {"when": datetime.date(1997, 3, 15)}) is False
        assert memory_cache.contains("k") is False


class TestTtl:
    def test_entry_expires_after_ttl(
        self, memory_cache: DocumentStoreCacheProvider, clock: FakeClock
    ) -> None:
        memory_cache.save("k", "v", ttl=60)

        clock.advance(59)
        assert memory_cache.fetch("k") == "v"

        clock.advance(1)
        assert memory_cache.fetch("k") is None
        assert memory_cache.contains("k") is False

    def test_zero_ttl_never_expires(
        self, memory_cache: DocumentStoreCacheProvider, clock: FakeClock
    ) -> None:
        memory_cache.save("k", "v", ttl=0)
        clock.advance(10**8)
        assert memory_cache.fetch("k") == "v"

    def test_expired_key_is_recreated_on_save(
        self, memory_cache: DocumentStoreCacheProvider, clock: FakeClock
    ) -> None:
        memory_cache.save("k", "old", ttl=5)
        clock.advance(10)

        assert memory_cache.save("k", "new") is True
        assert memory_cache.fetch("k") == "new"

    def test_unusable_ttl_is_not_cached(self, memory_cache: DocumentStoreCacheProvider) -> None:
        memory_cache.save("k", "old")

        assert memory_cache.save("k", "new", ttl="soon") is False
        assert memory_cache.fetch("k") == "old"


class TestFlushAndStats:
    def test_flush_removes_every_entry(self, memory_cache: DocumentStoreCacheProvider) -> None:
        for key in ("a", "b", "c"):
            memory_cache.save(key, key.upper())

        assert memory_cache.flush_all() is True

        for key in ("a", "b", "c"):
            assert memory_cache.contains(key) is False

    def test_cache_is_usable_after_flush(self, memory_cache: DocumentStoreCacheProvider) -> None:
        memory_cache.save("a", 1)
        memory_cache.flush_all()

        assert memory_cache.save("a", 2) is True
        assert memory_cache.fetch("a") == 2

    def test_flush_leaves_other_schemas_alone(self, memory_store: InMemoryDocumentStore) -> None:
        items = DocumentStoreCacheProvider(memory_store, {"index": INDEX_NAME})
        sessions = DocumentStoreCacheProvider(
            memory_store, {"index": INDEX_NAME, "schema": "session"}
        )
        items.save("k", "item")
        sessions.save("k", "session")

        items.flush_all()

        assert items.contains("k") is False
        assert sessions.fetch("k") == "session"

    def test_stats_are_the_store_status(
        self, memory_cache: DocumentStoreCacheProvider, memory_store: InMemoryDocumentStore
    ) -> None:
        memory_cache.save("a", 1)
        memory_cache.save("b", 2)

        stats = memory_cache.get_stats()

        assert stats == memory_store.get_status().get_server_status()
        assert stats["collections"][INDEX_NAME] == {"documents": 2, "schemas": ["cache-item"]}


class TestMultiKey:
    def test_save_and_fetch_multiple(self, memory_cache: DocumentStoreCacheProvider) -> None:
        assert memory_cache.save_multiple({"a": 1, "b": [2]}, ttl=30) is True
        assert memory_cache.fetch_multiple(["a", "b", "missing"]) == {"a": 1, "b": [2]}

    def test_delete_multiple(self, memory_cache: DocumentStoreCacheProvider) -> None:
        memory_cache.save_multiple({"a": 1, "b": 2})
        assert memory_cache.delete_multiple(["a", "b"]) is True
        assert memory_cache.fetch_multiple(["a", "b"]) == {}


def test_pickle_serializer_round_trips_python_objects(
    memory_store: InMemoryDocumentStore,
) -> None:
    cache = DocumentStoreCacheProvider(memory_store, {"index": INDEX_NAME, "serializer": "pickle"})
    payload = {"when": datetime.date(1997, 3, 15), "tags": {"techno"}}

    assert cache.save("k", payload) is True
    assert cache.fetch("k") == payload


def test_two_caches_on_one_store_are_independent(clock: FakeClock) -> None:
    store = InMemoryDocumentStore(timer=clock)
    first = DocumentStoreCacheProvider(store, {"index": "first"})
    second = DocumentStoreCacheProvider(store, {"index": "second"})

    first.save("k", "one")
    second.save("k", "two")

    assert first.fetch("k") == "one"
    assert second.fetch("k") == "two"


def test_missing_index_option_fails_before_touching_store() -> None:
    store = InMemoryDocumentStore()
    with pytest.raises(ConfigurationError):
        DocumentStoreCacheProvider(store, {})
    assert store.get_status().get_server_status()["collections"] == {}
