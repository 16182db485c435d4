"""Concrete adapters.

    cache/           -- DocumentStoreCacheProvider (ICacheProvider)
    document_store/  -- ElasticsearchDocumentStore, InMemoryDocumentStore
                        (IDocumentStoreClient)
"""
