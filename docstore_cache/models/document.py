"""Document and schema-field models exchanged with document-store bindings.

``Document`` is deliberately mutable: the cache adapter's update path reads
a document, replaces its fields and TTL in place, then hands the same object
back to the store.  ``FieldSpec`` is a frozen pydantic model since a schema
definition never changes once sent.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from pydantic import BaseModel, ConfigDict, Field


@dataclass
class Document:
    """A single record addressable by ``id`` within a schema.

    Attributes
    ----------
    id:
        The document id.  For cache entries this is the cache key.
    data:
        Field name -> value mapping.  Cache entries carry one ``value``
        field holding the serialized payload.
    ttl:
        Time-to-live in seconds, or ``None`` when no per-document expiry has
        been set (the store's default applies).
    """

    id: str
    data: dict[str, Any] = field(default_factory=dict)
    ttl: int | None = None

    def get(self, field_name: str, default: Any = None) -> Any:
        """Return the value of *field_name*, or *default* when absent."""
        return self.data.get(field_name, default)

    def set_data(self, fields: dict[str, Any]) -> None:
        """Replace every field of the document with *fields*."""
        self.data = dict(fields)

    def set_ttl(self, seconds: int) -> None:
        """Set a store-managed expiry of *seconds* from the next write."""
        if seconds <= 0:
            raise ValueError(f"TTL must be a positive number of seconds, got {seconds}")
        self.ttl = int(seconds)


class FieldSpec(BaseModel):
    """Declaration of one field in a schema/mapping definition."""

    model_config = ConfigDict(frozen=True)

    name: str = Field(min_length=1, description="Field name as stored in the document.")
    type: str = Field(default="string", description="Store-neutral field type.")
    include_in_all: bool = Field(
        default=True,
        description="Whether the field participates in catch-all text matching.",
    )
