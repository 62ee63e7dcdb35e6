"""
Cachefront - Null Cache Driver

Driver that stores nothing. Used to disable caching without touching call sites.
"""

from typing import Any

from ..interface import CacheDriver


class NullDriver(CacheDriver):
    """Every operation succeeds and has no effect; reads always miss."""

    backend = "null"

    async def get(self, key: str, type_: Any = None) -> Any | None:
        return None

    async def has(self, key: str) -> bool:
        return False

    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        return None

    async def forget(self, key: str) -> None:
        return None

    async def flush(self) -> None:
        return None
