"""
Cachefront - Cache Facade

User-facing cache API. Holds a single driver and builds the higher-level
operations out of the driver primitives.

The composed operations (``remember``, ``remember_forever``, ``add`` and
``pull``) are check-then-act sequences of two driver calls and are
best-effort, not atomic:

- two callers missing the same key in ``remember`` both compute and both
  write; the last write wins
- two callers racing ``add`` on an absent key can both see it missing and
  both return True
- a writer can repopulate a key between the read and the delete of ``pull``

No locking is added here: a fix needs backend-specific conditional writes.

Reads report a miss as ``None``, so ``None`` itself cannot be stored: every
writing operation rejects it with CacheSerializationError.
"""

from __future__ import annotations

import inspect
import logging
from collections.abc import Awaitable, Callable
from datetime import timedelta
from typing import Any, TypeVar

from ..errors import CacheSerializationError
from .interface import CacheDriver

logger = logging.getLogger(__name__)

T = TypeVar("T")

Ttl = int | float | timedelta


def _ttl_seconds(ttl: Ttl | None) -> float | None:
    """Normalize a TTL to seconds (None stays None)."""
    if ttl is None:
        return None
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


def _reject_none(key: str, value: Any) -> None:
    if value is None:
        raise CacheSerializationError(
            f"Cannot cache None for key '{key}': None is what reads return for a miss",
            details={"key": key, "value_type": "NoneType"},
        )


async def _resolve(value: T | Callable[[], T] | Callable[[], Awaitable[T]]) -> T:
    """Call ``value`` if it is callable, awaiting the result when needed."""
    if callable(value):
        value = value()
    if inspect.isawaitable(value):
        value = await value
    return value  # type: ignore[return-value]


class Cache:
    """
    Expiration-aware key-value cache over any CacheDriver.

    Usage:
        cache = Cache(MemoryDriver())
        await cache.put("foo", "bar", ttl=10)
        await cache.get("foo", type_=str)  # "bar"
        user = await cache.remember("user:1", timedelta(minutes=5), load_user)
    """

    def __init__(self, driver: CacheDriver):
        self.driver = driver

    async def __aenter__(self) -> Cache:
        return self

    async def __aexit__(self, *exc_info: Any) -> None:
        await self.close()

    # ------------ Delegated operations ------------

    async def get(self, key: str, default: Any = None, *, type_: Any = None) -> Any:
        """
        Retrieve an item from the cache.

        Args:
            key: Cache key
            default: Returned when the key is absent or expired
            type_: Optional type the stored value is validated against

        Returns:
            Cached value, or ``default``
        """
        value = await self.driver.get(key, type_)
        return default if value is None else value

    async def has(self, key: str) -> bool:
        """Check if an item exists in the cache and has not expired."""
        return await self.driver.has(key)

    async def put(self, key: str, value: Any, ttl: Ttl | None = None) -> None:
        """
        Store an item in the cache.

        Args:
            key: Cache key
            value: Value to cache
            ttl: Seconds or timedelta; None stores the item forever, a
                non-positive TTL removes the key instead of writing

        Raises:
            CacheSerializationError: If the value is None or cannot be encoded
        """
        _reject_none(key, value)
        seconds = _ttl_seconds(ttl)
        if seconds is not None and seconds <= 0:
            logger.debug("Non-positive TTL for '%s', forgetting key", key, extra={"key": key, "ttl": seconds})
            await self.driver.forget(key)
            return

        await self.driver.put(key, value, seconds)

    async def forever(self, key: str, value: Any) -> None:
        """Store an item in the cache indefinitely."""
        _reject_none(key, value)
        await self.driver.put(key, value, None)

    async def forget(self, key: str) -> None:
        """Remove an item from the cache."""
        await self.driver.forget(key)

    async def flush(self) -> None:
        """Remove all items from the cache."""
        await self.driver.flush()

    async def close(self) -> None:
        """Release the driver's resources."""
        await self.driver.close()

    # ------------ Composed operations ------------

    async def remember(
        self,
        key: str,
        ttl: Ttl,
        value: T | Callable[[], T] | Callable[[], Awaitable[T]],
        *,
        type_: Any = None,
    ) -> T:
        """
        Retrieve an item, or store it for ``ttl`` if it doesn't exist yet.

        ``value`` may be a plain value or a (sync or async) callable that
        is only invoked on a miss. Not atomic.
        A resolved value of None raises CacheSerializationError.
        """
        cached = await self.driver.get(key, type_)
        if cached is not None:
            return cached  # type: ignore[no-any-return]

        resolved = await _resolve(value)
        await self.put(key, resolved, ttl)
        return resolved

    async def remember_forever(
        self,
        key: str,
        value: T | Callable[[], T] | Callable[[], Awaitable[T]],
        *,
        type_: Any = None,
    ) -> T:
        """Retrieve an item, or store it forever if it doesn't exist yet. Not atomic."""
        cached = await self.driver.get(key, type_)
        if cached is not None:
            return cached  # type: ignore[no-any-return]

        resolved = await _resolve(value)
        await self.forever(key, resolved)
        return resolved

    async def pull(self, key: str, default: Any = None, *, type_: Any = None) -> Any:
        """
        Remove an item from the cache and return it.

        When the key is absent no delete is issued and ``default`` is
        returned. Not atomic.
        """
        value = await self.driver.get(key, type_)
        if value is None:
            return default

        await self.driver.forget(key)
        return value

    async def add(self, key: str, value: Any, ttl: Ttl) -> bool:
        """
        Store an item only if the key is not already present.

        Returns:
            True if the item was written, False if the key already existed
            (or the TTL was non-positive). Not atomic.
        """
        _reject_none(key, value)
        seconds = _ttl_seconds(ttl)
        if seconds is not None and seconds <= 0:
            return False

        if await self.driver.has(key):
            return False

        await self.driver.put(key, value, seconds)
        return True
