"""Utility modules for docstore-cache.

- **errors** -- Exception hierarchy rooted at DocStoreCacheError; the cache
  adapter distinguishes DocumentNotFoundError (a miss) from every other
  StoreError (propagated).
- **logging** -- explicit structlog setup: coloured console output in
  development, JSON lines in production; nothing is configured on import.
- **serialization** -- JSON and pickle codecs for the stored ``value`` field.
"""

from docstore_cache.utils.errors import (
    ConfigurationError,
    DocStoreCacheError,
    DocumentNotFoundError,
    SerializationError,
    StoreError,
)
from docstore_cache.utils.logging import configure_logging
from docstore_cache.utils.serialization import (
    JsonSerializer,
    PickleSerializer,
    Serializer,
    get_serializer,
)

__all__ = [
    "ConfigurationError",
    "DocStoreCacheError",
    "DocumentNotFoundError",
    "JsonSerializer",
    "PickleSerializer",
    "SerializationError",
    "Serializer",
    "StoreError",
    "configure_logging",
    "get_serializer",
]
