"""
Cachefront - Value Serialization

JSON codec used by every driver to turn caller values into opaque byte
payloads and back.

Encoding goes through a pydantic ``TypeAdapter[Any]``, so pydantic models,
dataclasses, datetimes, UUIDs and the JSON primitives all serialize without
per-call configuration. Decoding optionally validates the payload against a
target type, which is how typed reads (``get(key, type_=User)``) get real
instances back instead of plain dicts.
"""

from __future__ import annotations

from functools import lru_cache
from typing import Any

from pydantic import TypeAdapter, ValidationError
from pydantic_core import PydanticSerializationError

from ..errors import CacheSerializationError


@lru_cache(maxsize=256)
def _adapter(type_: Any) -> TypeAdapter[Any]:
    return TypeAdapter(type_)


class JsonCodec:
    """Encode values to UTF-8 JSON bytes and decode them back."""

    @staticmethod
    def encode(value: Any) -> bytes:
        """
        Serialize a value to bytes.

        Raises:
            CacheSerializationError: If the value has no JSON representation
        """
        try:
            return _adapter(Any).dump_json(value)
        except (PydanticSerializationError, TypeError, ValueError) as e:
            raise CacheSerializationError(
                f"Failed to encode value of type {type(value).__name__}: {e}",
                details={"value_type": type(value).__name__, "error": str(e)},
            ) from e

    @staticmethod
    def decode(data: bytes | str, type_: Any = None) -> Any:
        """
        Deserialize bytes produced by ``encode``.

        Args:
            data: Stored payload
            type_: Optional target type the payload is validated against

        Raises:
            CacheSerializationError: If the payload is malformed or does not
                match ``type_``
        """
        try:
            return _adapter(Any if type_ is None else type_).validate_json(data)
        except ValidationError as e:
            raise CacheSerializationError(
                f"Failed to decode cached value: {e}",
                details={"target_type": getattr(type_, "__name__", str(type_)), "error": str(e)},
            ) from e
        except TypeError as e:
            # Unhashable target types cannot go through the adapter cache
            raise CacheSerializationError(
                f"Unsupported target type for decoding: {type_!r}",
                details={"target_type": str(type_), "error": str(e)},
            ) from e
