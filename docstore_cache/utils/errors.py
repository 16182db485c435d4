"""Custom exception hierarchy for docstore-cache.

All package exceptions inherit from :class:`DocStoreCacheError`, which
carries an optional ``provider_name`` so error handlers can identify which
document-store backend (e.g. "elasticsearch", "memory") caused the failure.

    DocStoreCacheError  (base -- catch-all for any docstore-cache error)
    +-- ConfigurationError       (missing / invalid adapter options)
    +-- SerializationError       (payload cannot be encoded or decoded)
    +-- StoreError               (document-store request failed)
        +-- DocumentNotFoundError  (document id absent from the store)

``DocumentNotFoundError`` is the one store error the cache adapter treats as
an expected outcome: a miss on fetch/contains, ``False`` on delete, and the
create branch on save.  Every other :class:`StoreError` propagates.
"""


class DocStoreCacheError(Exception):
    """Base exception for all docstore-cache errors.

    Every subclass carries a human-readable ``message`` and an optional
    ``provider_name`` identifying which backend triggered the error.  The
    ``__str__`` method prefixes the provider name in brackets for structured
    log output, e.g. ``[elasticsearch] HTTP 503 on GET /cache/_doc/key``.
    """

    def __init__(
        self,
        message: str = "An unexpected error occurred",
        provider_name: str | None = None,
    ) -> None:
        self._message = message
        self._provider_name = provider_name
        super().__init__(self._message)

    @property
    def message(self) -> str:
        return self._message

    @property
    def provider_name(self) -> str | None:
        return self._provider_name

    def __str__(self) -> str:
        if self._provider_name:
            return f"[{self._provider_name}] {self._message}"
        return self._message


class ConfigurationError(DocStoreCacheError):
    """Raised when adapter options or settings are invalid or missing."""

    def __init__(
        self,
        message: str = "Invalid or missing configuration",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class SerializationError(DocStoreCacheError):
    """Raised when a cache payload cannot be serialized or deserialized."""

    def __init__(
        self,
        message: str = "Cache payload serialization failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


# ---------------------------------------------------------------------------
# Document-store errors
# ---------------------------------------------------------------------------

class StoreError(DocStoreCacheError):
    """Raised when a document-store request fails.

    Bindings wrap transport and protocol failures in this type (chained to
    the original exception) so callers can treat the cache as unavailable
    without knowing which backend is configured.
    """

    def __init__(
        self,
        message: str = "Document store request failed",
        provider_name: str | None = None,
    ) -> None:
        super().__init__(message=message, provider_name=provider_name)


class DocumentNotFoundError(StoreError):
    """Raised by a store binding when the requested document does not exist."""

    def __init__(
        self,
        message: str = "Document not found",
        provider_name: str | None = None,
        document_id: str | None = None,
    ) -> None:
        self._document_id = document_id
        super().__init__(message=message, provider_name=provider_name)

    @property
    def document_id(self) -> str | None:
        return self._document_id
