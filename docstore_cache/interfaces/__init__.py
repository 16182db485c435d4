"""Public interface definitions.

The cache adapter is written against two contracts: the cache contract it
*produces* (``ICacheProvider``) and the document-store client contract it
*consumes* (``IDocumentStoreClient`` and its collection/schema handles).
Concrete bindings are injected at construction time, so the same adapter
runs against Elasticsearch in production and an in-memory store in tests.

    Interface              ->  Concrete implementations
    ────────────────────────────────────────────────────────────
    ICacheProvider         ->  DocumentStoreCacheProvider
    IDocumentStoreClient   ->  ElasticsearchDocumentStore,
                               InMemoryDocumentStore
"""

from docstore_cache.interfaces.cache_provider import ICacheProvider
from docstore_cache.interfaces.document_store import (
    ICollection,
    IDocumentStoreClient,
    ISchema,
    IStoreStatus,
)

__all__ = [
    "ICacheProvider",
    "ICollection",
    "IDocumentStoreClient",
    "ISchema",
    "IStoreStatus",
]
