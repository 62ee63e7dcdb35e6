"""
Cachefront - Cache Driver Interface

Defines the abstract contract that every cache backend implements.

Backends differ widely in what they can do natively (per-key TTL, atomic
upsert, bulk clear). The contract is the same for all of them: an entry
whose expiration has passed must be invisible to ``get`` and ``has``, no
matter whether the backend hides it (delegated expiration) or the driver
compares the stored expiration on read (checked-on-read expiration).
"""

from abc import ABC, abstractmethod
from datetime import UTC, datetime, timedelta
from typing import Any

from ..errors import CacheSerializationError
from .serialization import JsonCodec


def _utcnow() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(UTC)


class CacheDriver(ABC):
    """
    Abstract base class for cache drivers.

    Drivers take TTLs as positive seconds (``None`` meaning no expiration)
    and never retry failed backend calls; errors surface as subclasses of
    ``CacheError``.
    """

    #: Backend name used in log records and error details
    backend: str = "abstract"

    def __init__(self, prefix: str = "", codec: JsonCodec | None = None):
        self.prefix = prefix
        self.codec = codec or JsonCodec()

    def _make_key(self, key: str) -> str:
        """Create prefixed storage key."""
        return f"{self.prefix}{key}"

    def _encode(self, key: str, value: Any) -> bytes:
        """Encode a value for storage; None is reserved for a miss and rejected."""
        if value is None:
            raise CacheSerializationError(
                f"Cannot cache None for key '{key}': None is what reads return for a miss",
                details={"key": key, "backend": self.backend, "value_type": "NoneType"},
            )
        return self.codec.encode(value)

    @staticmethod
    def _now() -> datetime:
        return _utcnow()

    @staticmethod
    def _expires_at(ttl: float | None) -> datetime | None:
        """Absolute UTC expiration for a TTL in seconds (None -> never)."""
        if ttl is None:
            return None
        return _utcnow() + timedelta(seconds=ttl)

    @staticmethod
    def _is_expired(expiration: datetime | None, now: datetime | None = None) -> bool:
        """Check whether an absolute expiration has passed."""
        if expiration is None:
            return False
        return (now or _utcnow()) >= expiration

    @abstractmethod
    async def get(self, key: str, type_: Any = None) -> Any | None:
        """
        Retrieve a value from the cache.

        Args:
            key: Cache key
            type_: Optional type the stored value is validated against

        Returns:
            Decoded value if present and not expired, None otherwise

        Raises:
            CacheSerializationError: If the stored payload cannot be decoded
            CacheConnectionError: If the backend call fails
        """

    @abstractmethod
    async def has(self, key: str) -> bool:
        """
        Check if a key is present and not expired.

        Raises:
            CacheConnectionError: If the backend call fails
        """

    @abstractmethod
    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        """
        Store a value, replacing any previous entry for the key.

        Args:
            key: Cache key
            value: Value to cache (JSON serializable, not None)
            ttl: Time-to-live in seconds, None for no expiration

        Raises:
            CacheSerializationError: If the value is None or cannot be encoded
            CacheConnectionError: If the backend call fails
        """

    @abstractmethod
    async def forget(self, key: str) -> None:
        """
        Remove a key. Forgetting an absent key is not an error.

        Raises:
            CacheConnectionError: If the backend call fails
        """

    @abstractmethod
    async def flush(self) -> None:
        """
        Remove every entry from the cache.

        Raises:
            CacheConnectionError: If the backend call fails
            UnsupportedOperationError: If the backend has no bulk-clear primitive
        """

    async def close(self) -> None:
        """
        Release clients and pooled connections.

        Default implementation holds nothing to release.
        """
