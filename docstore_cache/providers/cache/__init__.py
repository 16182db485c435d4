"""Cache providers.

DocumentStoreCacheProvider stores each cache entry as a document in a
document-store collection.  Pair it with ElasticsearchDocumentStore for a
cache shared across processes, or InMemoryDocumentStore for a local one.
"""

from docstore_cache.providers.cache.document_store_cache import DocumentStoreCacheProvider

__all__ = ["DocumentStoreCacheProvider"]
