"""
Cachefront - Memory Cache Driver

In-process dictionary cache with checked-on-read expiration.
Suitable for single-process deployments and tests.
"""

import asyncio
import logging
from datetime import datetime
from typing import Any

from ..interface import CacheDriver
from ..serialization import JsonCodec

logger = logging.getLogger(__name__)


class MemoryDriver(CacheDriver):
    """
    In-memory cache driver.

    Entries are stored encoded, next to their absolute expiration. Reads
    compare the expiration against the current time and report expired
    entries as absent without removing them, so ``get`` and ``has`` never
    need the write lock. Stale entries stay in memory until they are
    overwritten, forgotten or flushed.

    Mutations are serialized by an ``asyncio.Lock``.
    """

    backend = "memory"

    def __init__(self, prefix: str = "", codec: JsonCodec | None = None):
        super().__init__(prefix=prefix, codec=codec)

        # Cache storage: key -> (payload, expiration)
        self._cache: dict[str, tuple[bytes, datetime | None]] = {}

        # Lock for mutations
        self._lock = asyncio.Lock()

    def __len__(self) -> int:
        """Number of stored entries, expired ones included."""
        return len(self._cache)

    def _live_payload(self, key: str) -> bytes | None:
        entry = self._cache.get(self._make_key(key))
        if entry is None:
            return None

        payload, expiration = entry
        if self._is_expired(expiration):
            return None

        return payload

    async def get(self, key: str, type_: Any = None) -> Any | None:
        """Retrieve value from cache."""
        payload = self._live_payload(key)
        if payload is None:
            return None

        return self.codec.decode(payload, type_)

    async def has(self, key: str) -> bool:
        """Check if key exists and is not expired."""
        return self._live_payload(key) is not None

    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store value in cache."""
        payload = self._encode(key, value)
        expiration = self._expires_at(ttl)

        async with self._lock:
            self._cache[self._make_key(key)] = (payload, expiration)

    async def forget(self, key: str) -> None:
        """Delete key from cache."""
        async with self._lock:
            self._cache.pop(self._make_key(key), None)

    async def flush(self) -> None:
        """Clear all entries from cache."""
        async with self._lock:
            size = len(self._cache)
            self._cache.clear()

        logger.info("Cleared %d entries from memory cache", size, extra={"backend": self.backend})

    async def close(self) -> None:
        """Close cache and release resources."""
        # Memory driver holds no external resources; data stays in-process
        logger.debug("Memory cache driver closed", extra={"backend": self.backend})
