"""Abstract base classes for document-store client bindings.

This is the thin slice of a document-store client that the cache adapter
depends on: named collections (indexes) that can be checked, created and
refreshed, schemas (types/mappings) within a collection that hold documents
addressable by id, and a server status query.  Concrete bindings live in
``docstore_cache/providers/document_store/``.

All operations are synchronous and blocking.  Timeouts and retries are the
binding's concern, not the adapter's.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any

from docstore_cache.models.document import Document, FieldSpec


class IStoreStatus(ABC):
    """Snapshot of the store's server/cluster status."""

    @abstractmethod
    def get_server_status(self) -> dict[str, Any] | None:
        """Return the raw status payload, or ``None`` if the store reports none."""


class ISchema(ABC):
    """A field-typed partition of a collection holding documents by id."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The schema (type) name."""

    @property
    @abstractmethod
    def collection(self) -> ICollection:
        """The collection this schema belongs to."""

    @abstractmethod
    def define_fields(self, fields: list[FieldSpec], ttl_enabled: bool) -> None:
        """Send the field mapping for this schema.

        Parameters
        ----------
        fields:
            The fields documents of this schema carry.
        ttl_enabled:
            Whether per-document TTL expiry is honoured for this schema.
        """

    @abstractmethod
    def get_document(self, document_id: str) -> Document:
        """Fetch a document by id.

        Raises
        ------
        DocumentNotFoundError
            If no document with *document_id* exists in this schema.
        StoreError
            On any other store failure.
        """

    @abstractmethod
    def create_document(self, document_id: str, fields: dict[str, Any]) -> Document:
        """Build a new, unsaved document bound to this schema.

        No request is sent; call :meth:`add_document` to persist it.
        """

    @abstractmethod
    def add_document(self, document: Document) -> None:
        """Persist a newly created document."""

    @abstractmethod
    def update_document(self, document: Document) -> None:
        """Persist changes to an existing document."""

    @abstractmethod
    def delete_by_id(self, document_id: str) -> None:
        """Delete one document.

        Raises
        ------
        DocumentNotFoundError
            If no document with *document_id* exists in this schema.
        """

    @abstractmethod
    def delete(self) -> None:
        """Drop every document belonging to this schema."""


class ICollection(ABC):
    """A named collection (index) of documents."""

    @property
    @abstractmethod
    def name(self) -> str:
        """The collection name."""

    @abstractmethod
    def exists(self) -> bool:
        """Return ``True`` if the collection exists in the store."""

    @abstractmethod
    def create(self) -> None:
        """Create the collection.  Bindings should tolerate it already existing."""

    @abstractmethod
    def get_schema(self, name: str) -> ISchema:
        """Return a handle to the schema *name*.  No request is sent."""

    @abstractmethod
    def refresh(self) -> None:
        """Block until recent writes are visible to subsequent reads."""


class IDocumentStoreClient(ABC):
    """Entry point of a document-store binding."""

    @abstractmethod
    def get_collection(self, name: str) -> ICollection:
        """Return a handle to the collection *name*.  No request is sent."""

    @abstractmethod
    def get_status(self) -> IStoreStatus:
        """Query the store's server/cluster status."""

    @abstractmethod
    def get_provider_name(self) -> str:
        """Return a short identifier for this backend, e.g. ``"elasticsearch"``."""
