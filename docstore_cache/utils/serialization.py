"""Payload codecs for the cache ``value`` field.

Document stores hold the cached payload as a string field, so every payload
passes through a :class:`Serializer` on the way in and out.  Two codecs are
available:

- **json** (default) -- ``json.dumps`` with sorted keys and compact
  separators, so equal payloads always produce the same stored string.
  Round-trips str, int, float, bool, None, list and dict.
- **pickle** -- base64 text of a pickle.  Round-trips arbitrary Python
  objects, at the cost of only being readable from Python.  Only use it
  against a store that nobody else can write to.
"""

from __future__ import annotations

import base64
import binascii
import json
import pickle
from abc import ABC, abstractmethod
from typing import Any

from docstore_cache.utils.errors import ConfigurationError, SerializationError


class Serializer(ABC):
    """Converts cache payloads to and from the stored string form."""

    name: str = ""

    @abstractmethod
    def dumps(self, payload: Any) -> str:
        """Encode *payload*; raises :class:`SerializationError` on failure."""

    @abstractmethod
    def loads(self, data: str) -> Any:
        """Decode a stored string; raises :class:`SerializationError` on failure."""


class JsonSerializer(Serializer):
    name = "json"

    def dumps(self, payload: Any) -> str:
        try:
            return json.dumps(payload, sort_keys=True, separators=(",", ":"), ensure_ascii=False)
        except (TypeError, ValueError) as exc:
            raise SerializationError(
                message=f"Payload of type {type(payload).__name__} is not JSON serializable: {exc}"
            ) from exc

    def loads(self, data: str) -> Any:
        try:
            return json.loads(data)
        except (TypeError, ValueError) as exc:
            raise SerializationError(message=f"Stored value is not valid JSON: {exc}") from exc


class PickleSerializer(Serializer):
    name = "pickle"

    def dumps(self, payload: Any) -> str:
        try:
            raw = pickle.dumps(payload, protocol=pickle.HIGHEST_PROTOCOL)
        except (pickle.PicklingError, TypeError, AttributeError) as exc:
            raise SerializationError(
                message=f"Payload of type {type(payload).__name__} cannot be pickled: {exc}"
            ) from exc
        return base64.b64encode(raw).decode("ascii")

    def loads(self, data: str) -> Any:
        try:
            return pickle.loads(base64.b64decode(data.encode("ascii"), validate=True))
        except (binascii.Error, pickle.UnpicklingError, EOFError, ValueError, TypeError) as exc:
            raise SerializationError(message=f"Stored value is not a valid pickle: {exc}") from exc


_SERIALIZERS: dict[str, type[Serializer]] = {
    JsonSerializer.name: JsonSerializer,
    PickleSerializer.name: PickleSerializer,
}


def get_serializer(name: str | Serializer | None = None) -> Serializer:
    """Resolve a serializer by name; ``None`` means the JSON default.

    A :class:`Serializer` instance is returned unchanged so callers can plug
    in their own codec.
    """
    if isinstance(name, Serializer):
        return name
    key = (name or JsonSerializer.name).lower()
    try:
        return _SERIALIZERS[key]()
    except KeyError:
        raise ConfigurationError(
            message=(
                f"Unknown serializer {name!r}; expected one of: "
                f"{', '.join(sorted(_SERIALIZERS))}"
            )
        ) from None
