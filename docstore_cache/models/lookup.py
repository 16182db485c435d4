"""Tagged result of a document lookup.

The cache adapter has to tell three outcomes apart on every read: the
document exists, it does not, or the store failed.  Rather than branching on
exception types at each call site, lookups are folded into a
``DocumentLookup`` once and callers switch on :class:`LookupStatus`.
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from docstore_cache.models.document import Document


class LookupStatus(str, Enum):  # noqa: UP042 - StrEnum requires Python 3.11+
    FOUND = "FOUND"
    NOT_FOUND = "NOT_FOUND"
    ERROR = "ERROR"


@dataclass(frozen=True)
class DocumentLookup:
    """Outcome of reading one document by id.

    Exactly one of ``document`` (FOUND) or ``error`` (ERROR) is set;
    NOT_FOUND carries neither.
    """

    status: LookupStatus
    document: Document | None = None
    error: Exception | None = None

    @classmethod
    def found(cls, document: Document) -> DocumentLookup:
        return cls(status=LookupStatus.FOUND, document=document)

    @classmethod
    def not_found(cls) -> DocumentLookup:
        return cls(status=LookupStatus.NOT_FOUND)

    @classmethod
    def failed(cls, error: Exception) -> DocumentLookup:
        return cls(status=LookupStatus.ERROR, error=error)

    def unwrap(self) -> Document | None:
        """Return the document, ``None`` for NOT_FOUND, or re-raise the error."""
        if self.status is LookupStatus.ERROR and self.error is not None:
            raise self.error
        return self.document
