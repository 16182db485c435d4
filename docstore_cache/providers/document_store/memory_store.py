"""In-memory document store using cachetools.TLRUCache.

Simple, fast binding for development, tests and single-process use.  Each
collection is one ``TLRUCache`` keyed by ``(schema, document_id)``, so every
document can carry its own expiry time.  Nothing is shared across processes.

TTL semantics follow a document store with TTL support: a document written
with a TTL expires that many seconds after the write; a write without a TTL
keeps whatever expiry the document already had; TTLs are ignored for schemas
whose mapping was defined with ``ttl_enabled=False``.
"""

from __future__ import annotations

import math
import threading
import time
from collections.abc import Callable
from dataclasses import dataclass
from typing import Any

import structlog
from cachetools import TLRUCache

from docstore_cache.interfaces.document_store import (
    ICollection,
    IDocumentStoreClient,
    ISchema,
    IStoreStatus,
)
from docstore_cache.models.document import Document, FieldSpec
from docstore_cache.utils.errors import DocumentNotFoundError, StoreError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "memory"


@dataclass
class _StoredDocument:
    data: dict[str, Any]
    expires_at: float = math.inf


def _time_to_use(_key: Any, value: _StoredDocument, _now: float) -> float:
    return value.expires_at


class _CollectionState:
    """Documents and schema mappings of one collection."""

    def __init__(self, max_size: int, timer: Callable[[], float]) -> None:
        self.documents: TLRUCache[tuple[str, str], _StoredDocument] = TLRUCache(
            maxsize=max_size, ttu=_time_to_use, timer=timer
        )
        self.mappings: dict[str, dict[str, Any]] = {}


class InMemoryDocumentStore(IDocumentStoreClient):
    """Process-local document store.

    Parameters
    ----------
    max_size:
        Maximum number of documents per collection before the least recently
        used one is evicted.
    timer:
        Clock used for expiry, in seconds.  Defaults to ``time.monotonic``.
    """

    def __init__(
        self,
        max_size: int = 10_000,
        timer: Callable[[], float] = time.monotonic,
    ) -> None:
        self._max_size = max_size
        self._timer = timer
        self._collections: dict[str, _CollectionState] = {}
        self._lock = threading.RLock()

    # ------------------------------------------------------------------
    # IDocumentStoreClient implementation
    # ------------------------------------------------------------------

    def get_collection(self, name: str) -> ICollection:
        return _MemoryCollection(self, name)

    def get_status(self) -> IStoreStatus:
        with self._lock:
            collections: dict[str, Any] = {}
            for name, state in self._collections.items():
                state.documents.expire()
                collections[name] = {
                    "documents": len(state.documents),
                    "schemas": sorted(state.mappings),
                }
        return _MemoryStatus(
            {
                "backend": _PROVIDER_NAME,
                "max_size": self._max_size,
                "collections": collections,
            }
        )

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    # ------------------------------------------------------------------
    # Internal helpers shared by the handles
    # ------------------------------------------------------------------

    def _state(self, collection: str) -> _CollectionState:
        state = self._collections.get(collection)
        if state is None:
            raise StoreError(
                message=f"no such collection [{collection}]",
                provider_name=_PROVIDER_NAME,
            )
        return state

    def _expires_at(self, state: _CollectionState, schema: str, document: Document) -> float | None:
        """Expiry time for a write of *document*, or ``None`` to keep the current one."""
        if document.ttl is None:
            return None
        if not state.mappings.get(schema, {}).get("ttl_enabled", False):
            return math.inf
        return self._timer() + document.ttl


class _MemoryStatus(IStoreStatus):
    def __init__(self, payload: dict[str, Any]) -> None:
        self._payload = payload

    def get_server_status(self) -> dict[str, Any] | None:
        return self._payload


class _MemoryCollection(ICollection):
    def __init__(self, store: InMemoryDocumentStore, name: str) -> None:
        self._store = store
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    def exists(self) -> bool:
        with self._store._lock:
            return self._name in self._store._collections

    def create(self) -> None:
        with self._store._lock:
            if self._name not in self._store._collections:
                self._store._collections[self._name] = _CollectionState(
                    self._store._max_size, self._store._timer
                )
                logger.debug("memory_collection_created", collection=self._name)

    def get_schema(self, name: str) -> ISchema:
        return _MemorySchema(self._store, self, name)

    def refresh(self) -> None:
        # Writes are visible immediately; only validate the collection exists.
        with self._store._lock:
            self._store._state(self._name)


class _MemorySchema(ISchema):
    def __init__(self, store: InMemoryDocumentStore, collection: _MemoryCollection, name: str) -> None:
        self._store = store
        self._collection = collection
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def collection(self) -> ICollection:
        return self._collection

    def _key(self, document_id: str) -> tuple[str, str]:
        return (self._name, document_id)

    def _not_found(self, document_id: str) -> DocumentNotFoundError:
        return DocumentNotFoundError(
            message=f"[{self._collection.name}][{self._name}][{document_id}]: document missing",
            provider_name=_PROVIDER_NAME,
            document_id=document_id,
        )

    def define_fields(self, fields: list[FieldSpec], ttl_enabled: bool) -> None:
        with self._store._lock:
            state = self._store._state(self._collection.name)
            state.mappings[self._name] = {
                "fields": {f.name: f.type for f in fields},
                "ttl_enabled": ttl_enabled,
            }

    def get_document(self, document_id: str) -> Document:
        with self._store._lock:
            state = self._store._state(self._collection.name)
            stored = state.documents.get(self._key(document_id))
            if stored is None:
                raise self._not_found(document_id)
            return Document(id=document_id, data=dict(stored.data))

    def create_document(self, document_id: str, fields: dict[str, Any]) -> Document:
        return Document(id=document_id, data=dict(fields))

    def add_document(self, document: Document) -> None:
        with self._store._lock:
            state = self._store._state(self._collection.name)
            expires_at = self._store._expires_at(state, self._name, document)
            state.documents[self._key(document.id)] = _StoredDocument(
                data=dict(document.data),
                expires_at=math.inf if expires_at is None else expires_at,
            )

    def update_document(self, document: Document) -> None:
        with self._store._lock:
            state = self._store._state(self._collection.name)
            key = self._key(document.id)
            current = state.documents.get(key)
            if current is None:
                raise self._not_found(document.id)
            expires_at = self._store._expires_at(state, self._name, document)
            state.documents[key] = _StoredDocument(
                data=dict(document.data),
                expires_at=current.expires_at if expires_at is None else expires_at,
            )

    def delete_by_id(self, document_id: str) -> None:
        with self._store._lock:
            state = self._store._state(self._collection.name)
            if state.documents.pop(self._key(document_id), None) is None:
                raise self._not_found(document_id)

    def delete(self) -> None:
        with self._store._lock:
            state = self._store._state(self._collection.name)
            doomed = [key for key in list(state.documents.keys()) if key[0] == self._name]
            for key in doomed:
                state.documents.pop(key, None)
        logger.debug(
            "memory_schema_cleared",
            collection=self._collection.name,
            schema=self._name,
            deleted_count=len(doomed),
        )
