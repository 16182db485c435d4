"""Shared pytest fixtures for the docstore-cache test suite."""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import Any
from unittest.mock import MagicMock

import pytest
import structlog

from docstore_cache.interfaces.document_store import (
    ICollection,
    IDocumentStoreClient,
    ISchema,
    IStoreStatus,
)
from docstore_cache.models.document import Document
from docstore_cache.providers.cache.document_store_cache import (
    VALUE_FIELD,
    DocumentStoreCacheProvider,
)
from docstore_cache.providers.document_store.memory_store import InMemoryDocumentStore

INDEX_NAME = "elastic-cache"


@pytest.fixture(autouse=True)
def _isolate_logging():
    """Undo any logging configuration a test installs (e.g. via build_cache)."""
    root = logging.getLogger()
    handlers, level = list(root.handlers), root.level
    yield
    root.handlers[:] = handlers
    root.setLevel(level)
    structlog.reset_defaults()


# ---------------------------------------------------------------------------
# Mocked document-store client
# ---------------------------------------------------------------------------


@dataclass
class StoreMocks:
    """The three mocked handles a cache provider talks to."""

    client: MagicMock
    collection: MagicMock
    schema: MagicMock


@pytest.fixture
def store_mocks() -> StoreMocks:
    """Mock IDocumentStoreClient whose collection already exists.

    ``client.get_collection`` returns ``collection``; ``collection.get_schema``
    returns ``schema``; ``schema.collection`` points back at ``collection``.
    Document lookups are left unconfigured so each test states what the
    store holds.
    """
    client = MagicMock(spec=IDocumentStoreClient)
    collection = MagicMock(spec=ICollection)
    schema = MagicMock(spec=ISchema)

    client.get_provider_name.return_value = "mock-store"
    client.get_collection.return_value = collection
    collection.exists.return_value = True
    collection.get_schema.return_value = schema
    schema.collection = collection

    return StoreMocks(client=client, collection=collection, schema=schema)


@pytest.fixture
def mocked_cache(store_mocks: StoreMocks) -> DocumentStoreCacheProvider:
    """Cache provider wired to ``store_mocks``."""
    return DocumentStoreCacheProvider(store_mocks.client, {"index": INDEX_NAME})


def cached_document(doc_id: str, payload: Any) -> Document:
    """A document as the store would return it for a JSON-serialized *payload*."""
    return Document(id=doc_id, data={VALUE_FIELD: json.dumps(payload)})


def status_returning(payload: dict[str, Any] | None) -> MagicMock:
    status = MagicMock(spec=IStoreStatus)
    status.get_server_status.return_value = payload
    return status


# ---------------------------------------------------------------------------
# In-memory store
# ---------------------------------------------------------------------------


class FakeClock:
    """Manually advanced clock for TTL tests."""

    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def memory_store(clock: FakeClock) -> InMemoryDocumentStore:
    return InMemoryDocumentStore(max_size=100, timer=clock)


@pytest.fixture
def memory_cache(memory_store: InMemoryDocumentStore) -> DocumentStoreCacheProvider:
    return DocumentStoreCacheProvider(memory_store, {"index": INDEX_NAME})
