"""Factory functions that assemble a ready-to-use cache from configuration.

Wires together the document-store binding and the cache provider using the
resolved configuration from :func:`docstore_cache.config.load_config`::

    from docstore_cache.factory import build_cache

    cache = build_cache()            # env vars + config/config.yaml
    cache.save("user:42", {"name": "Ada"}, ttl=300)
"""

from __future__ import annotations

from typing import Any

import structlog

from docstore_cache.config.loader import load_config
from docstore_cache.config.settings import Settings
from docstore_cache.interfaces.document_store import IDocumentStoreClient
from docstore_cache.providers.cache.document_store_cache import DocumentStoreCacheProvider
from docstore_cache.providers.document_store.elasticsearch_store import ElasticsearchDocumentStore
from docstore_cache.providers.document_store.memory_store import InMemoryDocumentStore
from docstore_cache.utils.errors import ConfigurationError
from docstore_cache.utils.logging import configure_logging

logger = structlog.get_logger(logger_name=__name__)


def build_document_store(store_config: dict[str, Any]) -> IDocumentStoreClient:
    """Instantiate the document-store binding named by ``store_config["backend"]``."""
    backend = store_config.get("backend", "elasticsearch")
    if backend == "elasticsearch":
        return ElasticsearchDocumentStore(
            base_url=store_config.get("url", "http://localhost:9200"),
            timeout=float(store_config.get("timeout", 10.0)),
        )
    if backend == "memory":
        return InMemoryDocumentStore(max_size=int(store_config.get("max_size", 10_000)))
    raise ConfigurationError(
        message=f"Unknown document store backend {backend!r}; expected 'elasticsearch' or 'memory'"
    )


def build_cache(
    settings: Settings | None = None,
    config_path: str = "config/config.yaml",
    client: IDocumentStoreClient | None = None,
) -> DocumentStoreCacheProvider:
    """Build a :class:`DocumentStoreCacheProvider` from settings and YAML config.

    Args:
        settings: Settings to use; defaults to reading the environment.
        config_path: Optional YAML file layered under the environment.
        client: Pre-built document-store binding; skips backend selection.

    Raises:
        ConfigurationError: If no cache index is configured or the backend
            name is unknown.  No request is sent before these checks.
    """
    config = load_config(config_path, settings)
    configure_logging(log_level=str(config.get("logging", {}).get("level", "INFO")))

    cache_options = dict(config.get("cache", {}))
    store = client or build_document_store(config.get("store", {}))
    try:
        cache = DocumentStoreCacheProvider(store, cache_options)
    except ConfigurationError:
        if client is None and isinstance(store, ElasticsearchDocumentStore):
            store.close()
        raise

    logger.info(
        "cache_built",
        backend=store.get_provider_name(),
        index=cache.index_name,
        schema=cache.schema_name,
        serializer=cache.serializer.name,
    )
    return cache
