"""Cache provider backed by a remote document store.

Maps the cache contract onto document-store primitives: each cache entry is
one document whose id is the cache key and whose ``value`` field holds the
serialized payload.  The collection (index) and the schema (type/mapping)
are provisioned lazily on first use and memoized for the lifetime of the
provider.

Outcome rules:

- a missing document is a miss on fetch/contains and ``False`` on delete;
- save is best-effort: any failure while reading, writing or refreshing is
  logged and reported as ``False``;
- every other store failure propagates unchanged.

Each successful save refreshes the collection before returning, so the next
fetch of the same key sees the new value without waiting for the store's
own refresh interval.
"""

from __future__ import annotations

import threading
from collections.abc import Mapping
from typing import Any

import structlog

from docstore_cache.interfaces.cache_provider import ICacheProvider
from docstore_cache.interfaces.document_store import ICollection, IDocumentStoreClient, ISchema
from docstore_cache.models.document import FieldSpec
from docstore_cache.models.lookup import DocumentLookup, LookupStatus
from docstore_cache.utils.errors import ConfigurationError, DocumentNotFoundError
from docstore_cache.utils.serialization import Serializer, get_serializer

logger = structlog.get_logger(logger_name=__name__)

ID_FIELD = "id"
VALUE_FIELD = "value"
DEFAULT_SCHEMA_NAME = "cache-item"

CACHE_FIELDS: list[FieldSpec] = [
    FieldSpec(name=ID_FIELD, type="string", include_in_all=True),
    FieldSpec(name=VALUE_FIELD, type="string", include_in_all=True),
]


class DocumentStoreCacheProvider(ICacheProvider):
    """Key-value cache stored as documents in a document-store collection.

    Parameters
    ----------
    client:
        Document-store binding used for every request.
    options:
        Adapter options.  ``index`` (required) names the collection;
        ``schema`` overrides the schema name (default ``"cache-item"``);
        ``serializer`` selects the payload codec (``"json"`` or
        ``"pickle"``, or a :class:`Serializer` instance).

    Raises
    ------
    ConfigurationError
        If ``index`` is missing or empty.  No request is sent before this
        check.
    """

    def __init__(self, client: IDocumentStoreClient, options: Mapping[str, Any]) -> None:
        index_name = options.get("index")
        if not isinstance(index_name, str) or not index_name.strip():
            raise ConfigurationError(
                message=f'You must provide the "index" option for {type(self).__name__}',
                provider_name=client.get_provider_name(),
            )
        schema_name = options.get("schema") or DEFAULT_SCHEMA_NAME

        self._client = client
        self._index_name = index_name
        self._schema_name = str(schema_name)
        self._serializer: Serializer = get_serializer(options.get("serializer"))

        # Re-entrant: schema provisioning resolves the collection under the same lock.
        self._lock = threading.RLock()
        self._collection: ICollection | None = None
        self._schema: ISchema | None = None

    @property
    def index_name(self) -> str:
        return self._index_name

    @property
    def schema_name(self) -> str:
        return self._schema_name

    @property
    def serializer(self) -> Serializer:
        return self._serializer

    # ------------------------------------------------------------------
    # Lazy provisioning
    # ------------------------------------------------------------------

    def _get_collection(self) -> ICollection:
        """Return the collection handle, creating the collection on first use."""
        if self._collection is not None:
            return self._collection
        with self._lock:
            if self._collection is None:
                collection = self._client.get_collection(self._index_name)
                if not collection.exists():
                    collection.create()
                    logger.info("collection_created", index=self._index_name)
                self._collection = collection
        return self._collection

    def _get_schema(self) -> ISchema:
        """Return the schema handle, sending its field mapping on first use."""
        if self._schema is not None:
            return self._schema
        with self._lock:
            if self._schema is None:
                schema = self._get_collection().get_schema(self._schema_name)
                schema.define_fields(CACHE_FIELDS, ttl_enabled=True)
                logger.info(
                    "schema_defined",
                    index=self._index_name,
                    schema=self._schema_name,
                    fields=[f.name for f in CACHE_FIELDS],
                )
                self._schema = schema
        return self._schema

    def _lookup(self, schema: ISchema, key: str) -> DocumentLookup:
        try:
            return DocumentLookup.found(schema.get_document(key))
        except DocumentNotFoundError:
            return DocumentLookup.not_found()
        except Exception as exc:
            return DocumentLookup.failed(exc)

    # ------------------------------------------------------------------
    # ICacheProvider hooks
    # ------------------------------------------------------------------

    def _do_fetch(self, key: str, default: Any) -> Any:
        lookup = self._lookup(self._get_schema(), key)
        document = lookup.unwrap()
        if document is None:
            logger.debug("cache_miss", key=key)
            return default

        raw = document.get(VALUE_FIELD)
        if raw is None:
            logger.warning("cache_entry_without_value", key=key, index=self._index_name)
            return default

        logger.debug("cache_hit", key=key)
        return self._serializer.loads(raw)

    def _do_contains(self, key: str) -> bool:
        lookup = self._lookup(self._get_schema(), key)
        return lookup.unwrap() is not None

    def _do_save(self, key: str, data: Any, ttl: int) -> bool:
        schema = self._get_schema()
        try:
            ttl = max(int(ttl), 0)
            fields = {VALUE_FIELD: self._serializer.dumps(data)}
            lookup = self._lookup(schema, key)

            if lookup.status is LookupStatus.NOT_FOUND:
                document = schema.create_document(key, fields)
                if ttl > 0:
                    document.set_ttl(ttl)
                schema.add_document(document)
                action = "create"
            else:
                # ERROR re-raises here and is reported as a failed save below.
                document = lookup.unwrap()
                document.set_data(fields)
                if ttl > 0:
                    document.set_ttl(ttl)
                schema.update_document(document)
                action = "update"

            schema.collection.refresh()
        except Exception as exc:
            logger.warning(
                "cache_save_failed",
                key=key,
                index=self._index_name,
                error=str(exc),
                error_type=type(exc).__name__,
            )
            return False

        logger.debug("cache_save", key=key, action=action, ttl=ttl or None)
        return True

    def _do_delete(self, key: str) -> bool:
        try:
            self._get_schema().delete_by_id(key)
        except DocumentNotFoundError:
            logger.debug("cache_delete_missing", key=key)
            return False
        logger.debug("cache_delete", key=key)
        return True

    def _do_flush(self) -> bool:
        self._get_schema().delete()
        logger.info("cache_flush", index=self._index_name, schema=self._schema_name)
        return True

    def _do_get_stats(self) -> dict[str, Any] | None:
        return self._client.get_status().get_server_status()
