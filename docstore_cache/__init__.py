"""docstore-cache -- a key-value cache stored in a document store.

Each cache entry is a document whose id is the cache key and whose
``value`` field holds the serialized payload.  Collections and schemas are
provisioned lazily on first use; writes refresh the collection so the next
read sees them immediately.

    from docstore_cache import DocumentStoreCacheProvider, ElasticsearchDocumentStore

    store = ElasticsearchDocumentStore("http://localhost:9200")
    cache = DocumentStoreCacheProvider(store, {"index": "app-cache"})
    cache.save("greeting", "hello", ttl=60)
    cache.fetch("greeting")  # -> "hello"
"""

from docstore_cache.factory import build_cache, build_document_store
from docstore_cache.interfaces import ICacheProvider, IDocumentStoreClient
from docstore_cache.providers.cache import DocumentStoreCacheProvider
from docstore_cache.providers.document_store import (
    ElasticsearchDocumentStore,
    InMemoryDocumentStore,
)
from docstore_cache.utils.errors import (
    ConfigurationError,
    DocStoreCacheError,
    DocumentNotFoundError,
    SerializationError,
    StoreError,
)

__version__ = "0.1.0"

__all__ = [
    "ConfigurationError",
    "DocStoreCacheError",
    "DocumentNotFoundError",
    "DocumentStoreCacheProvider",
    "ElasticsearchDocumentStore",
    "ICacheProvider",
    "IDocumentStoreClient",
    "InMemoryDocumentStore",
    "SerializationError",
    "StoreError",
    "build_cache",
    "build_document_store",
]
