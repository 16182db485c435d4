"""Document-store bindings.

ElasticsearchDocumentStore talks to an Elasticsearch cluster over HTTP.
InMemoryDocumentStore keeps documents in a per-collection TLRUCache and is
meant for development and tests.
"""

from docstore_cache.providers.document_store.elasticsearch_store import ElasticsearchDocumentStore
from docstore_cache.providers.document_store.memory_store import InMemoryDocumentStore

__all__ = ["ElasticsearchDocumentStore", "InMemoryDocumentStore"]
