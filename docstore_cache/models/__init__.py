"""docstore-cache data models.

    - document.py -- Document (mutable record) and FieldSpec (schema field)
    - lookup.py   -- DocumentLookup tagged result and LookupStatus
"""

from __future__ import annotations

from docstore_cache.models.document import Document, FieldSpec
from docstore_cache.models.lookup import DocumentLookup, LookupStatus

__all__ = [
    "Document",
    "DocumentLookup",
    "FieldSpec",
    "LookupStatus",
]
