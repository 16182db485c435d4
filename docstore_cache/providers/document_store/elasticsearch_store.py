"""Elasticsearch document-store binding over the REST API.

Talks to Elasticsearch 7.x/8.x with a synchronous ``httpx.Client``.  The
document-store concepts map onto the REST API as follows:

    collection  ->  index               (HEAD/PUT /{index}, POST /_refresh)
    schema      ->  ``schema`` keyword field inside the index; a document's
                    ``_id`` is the schema name and the document id joined by
                    a unit separator, so schemas sharing an index never
                    collide; schemas are dropped with ``_delete_by_query``
    TTL         ->  ``expires_at`` epoch-millis field; expired documents are
                    reported as missing on read and on delete, and can be
                    removed in bulk with :meth:`ElasticsearchSchema.purge_expired`

Indices no longer support mapping types or the legacy ``_ttl`` field, so
expiry is enforced by this binding rather than by the server.

Every transport failure or unexpected HTTP status is raised as
:class:`StoreError` chained to the ``httpx`` exception; a missing document
is raised as :class:`DocumentNotFoundError`.
"""

from __future__ import annotations

import time
from collections.abc import Callable
from typing import Any
from urllib.parse import quote

import httpx
import structlog

from docstore_cache.interfaces.document_store import (
    ICollection,
    IDocumentStoreClient,
    ISchema,
    IStoreStatus,
)
from docstore_cache.models.document import Document, FieldSpec
from docstore_cache.utils.errors import DocumentNotFoundError, StoreError

logger = structlog.get_logger(logger_name=__name__)

_PROVIDER_NAME = "elasticsearch"
_DEFAULT_URL = "http://localhost:9200"
_DEFAULT_TIMEOUT = 10.0

SCHEMA_FIELD = "schema"
EXPIRES_FIELD = "expires_at"
_META_FIELDS = frozenset({SCHEMA_FIELD, EXPIRES_FIELD})
_ID_SEPARATOR = "\x1f"


def document_key(schema: str, document_id: str) -> str:
    """The Elasticsearch ``_id`` of *document_id* within *schema*."""
    return f"{schema}{_ID_SEPARATOR}{document_id}"


# Store-neutral field types -> Elasticsearch field mappings.  There is no
# ``_all`` field since 6.0, so FieldSpec.include_in_all has no counterpart.
_FIELD_MAPPINGS: dict[str, dict[str, Any]] = {
    "string": {"type": "keyword", "ignore_above": 256},
    "text": {"type": "text"},
    "integer": {"type": "long"},
    "float": {"type": "double"},
    "boolean": {"type": "boolean"},
    "date": {"type": "date"},
}


class ElasticsearchDocumentStore(IDocumentStoreClient):
    """Document-store client for an Elasticsearch cluster.

    Parameters
    ----------
    base_url:
        Cluster URL, e.g. ``http://localhost:9200``.
    timeout:
        Per-request timeout in seconds.  Ignored when *http_client* is given.
    http_client:
        Pre-configured client (auth, TLS, transport).  The store only closes
        clients it created itself.
    clock:
        Wall clock in seconds, used for TTL expiry.  Defaults to ``time.time``.
    """

    def __init__(
        self,
        base_url: str = _DEFAULT_URL,
        timeout: float = _DEFAULT_TIMEOUT,
        http_client: httpx.Client | None = None,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._owns_client = http_client is None
        self._client = http_client or httpx.Client(
            base_url=base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
        )
        self._clock = clock

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def close(self) -> None:
        """Close the HTTP client if this store created it."""
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> ElasticsearchDocumentStore:
        return self

    def __exit__(self, *exc_info: object) -> None:
        self.close()

    # ------------------------------------------------------------------
    # IDocumentStoreClient implementation
    # ------------------------------------------------------------------

    def get_collection(self, name: str) -> ICollection:
        return ElasticsearchIndex(self, name)

    def get_status(self) -> IStoreStatus:
        response = self.request("GET", "/_cluster/health", allowed_statuses=(404,))
        if response.status_code == 404:
            return _ElasticsearchStatus(None)
        return _ElasticsearchStatus(self.json_body(response))

    def get_provider_name(self) -> str:
        return _PROVIDER_NAME

    # ------------------------------------------------------------------
    # HTTP plumbing shared by the handles
    # ------------------------------------------------------------------

    def now_millis(self) -> int:
        return int(self._clock() * 1000)

    def request(
        self,
        method: str,
        path: str,
        *,
        json: dict[str, Any] | None = None,
        params: dict[str, Any] | None = None,
        allowed_statuses: tuple[int, ...] = (),
    ) -> httpx.Response:
        """Send one request; statuses >= 400 not in *allowed_statuses* raise StoreError."""
        try:
            response = self._client.request(method, path, json=json, params=params)
        except httpx.TimeoutException as exc:
            logger.warning("elasticsearch_request_timeout", method=method, path=path)
            raise StoreError(
                message=f"Timeout on {method} {path}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        except httpx.HTTPError as exc:
            logger.warning("elasticsearch_request_failed", method=method, path=path, error=str(exc))
            raise StoreError(
                message=f"HTTP error on {method} {path}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc

        if response.status_code >= 400 and response.status_code not in allowed_statuses:
            error_type, reason = _error_details(response)
            logger.warning(
                "elasticsearch_request_rejected",
                method=method,
                path=path,
                status=response.status_code,
                error_type=error_type,
            )
            raise StoreError(
                message=f"HTTP {response.status_code} on {method} {path}: {error_type}: {reason}",
                provider_name=_PROVIDER_NAME,
            )
        return response

    @staticmethod
    def json_body(response: httpx.Response) -> dict[str, Any]:
        try:
            body = response.json()
        except ValueError as exc:
            raise StoreError(
                message=f"Unparseable response body from {response.request.url}: {exc}",
                provider_name=_PROVIDER_NAME,
            ) from exc
        if not isinstance(body, dict):
            raise StoreError(
                message=f"Expected a JSON object from {response.request.url}",
                provider_name=_PROVIDER_NAME,
            )
        return body


def _error_details(response: httpx.Response) -> tuple[str, str]:
    """Extract ``(type, reason)`` from an Elasticsearch error body."""
    try:
        error = response.json().get("error")
    except (ValueError, AttributeError):
        return "unknown_error", response.text[:200]
    if isinstance(error, dict):
        return str(error.get("type", "unknown_error")), str(error.get("reason", ""))
    return "unknown_error", str(error)


class _ElasticsearchStatus(IStoreStatus):
    def __init__(self, payload: dict[str, Any] | None) -> None:
        self._payload = payload

    def get_server_status(self) -> dict[str, Any] | None:
        return self._payload


class ElasticsearchIndex(ICollection):
    """An Elasticsearch index used as a document collection."""

    def __init__(self, store: ElasticsearchDocumentStore, name: str) -> None:
        self._store = store
        self._name = name

    @property
    def name(self) -> str:
        return self._name

    @property
    def path(self) -> str:
        return f"/{quote(self._name, safe='')}"

    def exists(self) -> bool:
        response = self._store.request("HEAD", self.path, allowed_statuses=(404,))
        return response.status_code == 200

    def create(self) -> None:
        response = self._store.request("PUT", self.path, allowed_statuses=(400,))
        if response.status_code == 400:
            error_type, reason = _error_details(response)
            if error_type != "resource_already_exists_exception":
                raise StoreError(
                    message=f"Cannot create index [{self._name}]: {error_type}: {reason}",
                    provider_name=_PROVIDER_NAME,
                )
            logger.debug("elasticsearch_index_already_exists", index=self._name)

    def get_schema(self, name: str) -> ISchema:
        return ElasticsearchSchema(self._store, self, name)

    def refresh(self) -> None:
        self._store.request("POST", f"{self.path}/_refresh")


class ElasticsearchSchema(ISchema):
    """Documents of one schema inside an index, discriminated by the ``schema`` field.

    Document TTLs are only written once :meth:`define_fields` has been called
    with ``ttl_enabled=True`` on this handle.
    """

    def __init__(self, store: ElasticsearchDocumentStore, index: ElasticsearchIndex, name: str) -> None:
        self._store = store
        self._index = index
        self._name = name
        self._ttl_enabled = False

    @property
    def name(self) -> str:
        return self._name

    @property
    def collection(self) -> ICollection:
        return self._index

    @property
    def ttl_enabled(self) -> bool:
        return self._ttl_enabled

    def _doc_path(self, document_id: str) -> str:
        return f"{self._index.path}/_doc/{quote(document_key(self._name, document_id), safe='')}"

    def _not_found(self, document_id: str) -> DocumentNotFoundError:
        return DocumentNotFoundError(
            message=f"[{self._index.name}][{self._name}][{document_id}]: document missing",
            provider_name=_PROVIDER_NAME,
            document_id=document_id,
        )

    def _source(self, document: Document) -> dict[str, Any]:
        source: dict[str, Any] = {"id": document.id, **document.data, SCHEMA_FIELD: self._name}
        if document.ttl is not None and self._ttl_enabled:
            source[EXPIRES_FIELD] = self._store.now_millis() + document.ttl * 1000
        return source

    def define_fields(self, fields: list[FieldSpec], ttl_enabled: bool) -> None:
        properties: dict[str, Any] = {}
        for spec in fields:
            try:
                properties[spec.name] = dict(_FIELD_MAPPINGS[spec.type])
            except KeyError:
                raise StoreError(
                    message=f"Unsupported field type {spec.type!r} for field {spec.name!r}",
                    provider_name=_PROVIDER_NAME,
                ) from None
        properties[SCHEMA_FIELD] = {"type": "keyword"}
        if ttl_enabled:
            properties[EXPIRES_FIELD] = {"type": "date", "format": "epoch_millis"}

        self._store.request(
            "PUT",
            f"{self._index.path}/_mapping",
            json={
                "_meta": {"schema": self._name, "ttl_enabled": ttl_enabled},
                "properties": properties,
            },
        )
        self._ttl_enabled = ttl_enabled

    def get_document(self, document_id: str) -> Document:
        response = self._store.request("GET", self._doc_path(document_id), allowed_statuses=(404,))
        if response.status_code == 404:
            raise self._not_found(document_id)
        body = self._store.json_body(response)
        source = body.get("_source")
        if not body.get("found", False) or not isinstance(source, dict):
            raise self._not_found(document_id)
        if source.get(SCHEMA_FIELD) != self._name:
            raise self._not_found(document_id)

        expires_at = source.get(EXPIRES_FIELD)
        if expires_at is not None and int(expires_at) <= self._store.now_millis():
            logger.debug("elasticsearch_document_expired", index=self._index.name, id=document_id)
            raise self._not_found(document_id)

        data = {key: value for key, value in source.items() if key not in _META_FIELDS}
        return Document(id=document_id, data=data)

    def create_document(self, document_id: str, fields: dict[str, Any]) -> Document:
        return Document(id=document_id, data=dict(fields))

    def add_document(self, document: Document) -> None:
        self._store.request("PUT", self._doc_path(document.id), json=self._source(document))

    def update_document(self, document: Document) -> None:
        # Partial update: a document saved without a TTL keeps its current expires_at.
        key = quote(document_key(self._name, document.id), safe="")
        response = self._store.request(
            "POST",
            f"{self._index.path}/_update/{key}",
            json={"doc": self._source(document)},
            allowed_statuses=(404,),
        )
        if response.status_code == 404:
            raise self._not_found(document.id)

    def delete_by_id(self, document_id: str) -> None:
        # Expired documents count as absent, matching get_document.
        deleted = self._delete_by_query(
            {
                "bool": {
                    "filter": [
                        {"ids": {"values": [document_key(self._name, document_id)]}},
                        {"term": {SCHEMA_FIELD: self._name}},
                    ],
                    "must_not": [
                        {"range": {EXPIRES_FIELD: {"lte": self._store.now_millis()}}},
                    ],
                }
            }
        )
        if deleted == 0:
            raise self._not_found(document_id)

    def delete(self) -> None:
        deleted = self._delete_by_query({"term": {SCHEMA_FIELD: self._name}})
        logger.info(
            "elasticsearch_schema_cleared",
            index=self._index.name,
            schema=self._name,
            deleted_count=deleted,
        )

    def purge_expired(self) -> int:
        """Delete every document of this schema whose TTL has elapsed.

        Returns the number of deleted documents.
        """
        deleted = self._delete_by_query(
            {
                "bool": {
                    "filter": [
                        {"term": {SCHEMA_FIELD: self._name}},
                        {"range": {EXPIRES_FIELD: {"lte": self._store.now_millis()}}},
                    ]
                }
            }
        )
        logger.info(
            "elasticsearch_expired_purged",
            index=self._index.name,
            schema=self._name,
            deleted_count=deleted,
        )
        return deleted

    def _delete_by_query(self, query: dict[str, Any]) -> int:
        response = self._store.request(
            "POST",
            f"{self._index.path}/_delete_by_query",
            params={"conflicts": "proceed", "refresh": "true"},
            json={"query": query},
        )
        return int(self._store.json_body(response).get("deleted", 0))
