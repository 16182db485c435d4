"""Abstract base class for cache service providers.

Defines the key-value cache contract callers program against: fetch,
contains, save with optional expiry, delete, flush and stats.  Public
methods are concrete and delegate to protected ``_do_*`` hooks, so every
backend shares the same argument handling and multi-key helpers while only
implementing the store-specific part.

Keys arrive already namespaced by the caller; providers store them as-is.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Mapping
from typing import Any


class ICacheProvider(ABC):
    """Contract for key-value cache services.

    All operations are synchronous.  A miss is a normal outcome, never an
    exception; :meth:`save` never raises for store failures and reports them
    as ``False`` instead.
    """

    # ------------------------------------------------------------------
    # Public API
    # ------------------------------------------------------------------

    def fetch(self, key: str, default: Any = None) -> Any:
        """Retrieve the value stored under *key*.

        Parameters
        ----------
        key:
            The cache key to look up.
        default:
            Returned on a miss.  Pass a sentinel to tell a cached ``None``
            apart from a miss.

        Returns
        -------
        Any
            The cached value if present; *default* otherwise.
        """
        return self._do_fetch(str(key), default)

    def contains(self, key: str) -> bool:
        """Return ``True`` if an entry exists for *key*."""
        return self._do_contains(str(key))

    def save(self, key: str, data: Any, ttl: int = 0) -> bool:
        """Store *data* under *key*, replacing any existing entry.

        Parameters
        ----------
        key:
            The cache key.
        data:
            The value to store.  Must be accepted by the provider's
            serializer.
        ttl:
            Lifetime in seconds.  ``0`` (or less) sets no per-entry expiry.
            A value that is not an integer makes the save fail (``False``).

        Returns
        -------
        bool
            ``True`` if the entry was stored; ``False`` means "not cached"
            and is never fatal to the caller.
        """
        return self._do_save(str(key), data, ttl)

    def delete(self, key: str) -> bool:
        """Remove the entry for *key*.

        Returns ``False`` when there was nothing to delete.
        """
        return self._do_delete(str(key))

    def flush_all(self) -> bool:
        """Remove every entry owned by this provider."""
        return self._do_flush()

    def get_stats(self) -> dict[str, Any] | None:
        """Return backend diagnostics, or ``None`` if none are available."""
        return self._do_get_stats()

    # ------------------------------------------------------------------
    # Multi-key helpers
    # ------------------------------------------------------------------

    def fetch_multiple(self, keys: Iterable[str]) -> dict[str, Any]:
        """Fetch several keys; the result only contains the hits."""
        missing = object()
        found: dict[str, Any] = {}
        for key in keys:
            value = self.fetch(key, missing)
            if value is not missing:
                found[key] = value
        return found

    def save_multiple(self, entries: Mapping[str, Any], ttl: int = 0) -> bool:
        """Save every entry; ``True`` only if all of them were stored."""
        success = True
        for key, data in entries.items():
            if not self.save(key, data, ttl):
                success = False
        return success

    def delete_multiple(self, keys: Iterable[str]) -> bool:
        """Delete every key; ``True`` only if all of them existed."""
        success = True
        for key in keys:
            if not self.delete(key):
                success = False
        return success

    # ------------------------------------------------------------------
    # Backend hooks
    # ------------------------------------------------------------------

    @abstractmethod
    def _do_fetch(self, key: str, default: Any) -> Any:
        """Return the stored value, or *default* on a miss."""

    @abstractmethod
    def _do_contains(self, key: str) -> bool:
        """Return whether *key* has an entry."""

    @abstractmethod
    def _do_save(self, key: str, data: Any, ttl: int) -> bool:
        """Store *data*; *ttl* is passed through as given and may need coercing."""

    @abstractmethod
    def _do_delete(self, key: str) -> bool:
        """Delete *key*; ``False`` when it was absent."""

    @abstractmethod
    def _do_flush(self) -> bool:
        """Remove all entries."""

    @abstractmethod
    def _do_get_stats(self) -> dict[str, Any] | None:
        """Return backend diagnostics."""
