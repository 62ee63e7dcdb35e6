"""
Cachefront - Redis Cache Driver

Asynchronous Redis cache driver with:
- JSON payloads stored as raw bytes
- Native per-key expiry (SET ... PX), so reads need no local expiration check
- Key prefixing for shared databases
- FLUSHDB for bulk clear

Requires: redis>=5 with asyncio support

Example:
    driver = RedisDriver(redis_url="redis://localhost:6379/0", prefix="app:")
    await driver.put("greeting", {"msg": "hello"}, ttl=60)
    val = await driver.get("greeting")
"""

from __future__ import annotations

import logging
import math
from typing import Any

from redis.asyncio import Redis
from redis.exceptions import RedisError

from ...errors import CacheConnectionError
from ..interface import CacheDriver
from ..serialization import JsonCodec

logger = logging.getLogger(__name__)


class RedisDriver(CacheDriver):
    """
    Redis cache driver.

    Notes:
    - The client connects lazily; every command checks a
      connection out of the pool and returns it when the command completes.
    - TTL is applied with millisecond precision via PX; None stores the key
      without expiry.
    - ``flush`` runs FLUSHDB and therefore clears the whole selected
      database, not only prefixed keys.
    """

    backend = "redis"

    def __init__(
        self,
        redis_url: str | None = None,
        prefix: str = "",
        max_connections: int = 10,
        socket_timeout: int = 5,
        client: Redis | None = None,
        codec: JsonCodec | None = None,
    ) -> None:
        """
        Initialize Redis cache driver.

        Args:
            redis_url: Connection URL, e.g. redis://localhost:6379/0 or rediss:// for TLS
            prefix: Prefix for all keys
            max_connections: Connection pool size
            socket_timeout: Socket timeout in seconds
            client: Pre-built client to use instead of connecting to ``redis_url``
            codec: Value codec (JSON by default)
        """
        super().__init__(prefix=prefix, codec=codec)

        if client is None:
            if not redis_url:
                raise ValueError("redis_url is required")

            # Bytes in, bytes out: payloads are opaque to Redis
            client = Redis.from_url(  # type: ignore[call-overload]
                url=redis_url,
                decode_responses=False,
                max_connections=max_connections,
                socket_timeout=socket_timeout,
            )

        self._client: Redis = client

    # ------------ Helpers ------------

    def _failure(self, operation: str, key: str | None, error: RedisError) -> CacheConnectionError:
        logger.error(
            f"Redis {operation} failed for key '{key}': {error}",
            extra={"backend": self.backend, "operation": operation, "key": key, "error": str(error)},
            exc_info=True,
        )
        return CacheConnectionError(self.backend, operation, {"key": key, "error": str(error)})

    @staticmethod
    def _ttl_milliseconds(ttl: float) -> int:
        """Round up so a sub-millisecond TTL still yields a valid PX argument."""
        return max(1, math.ceil(ttl * 1000))

    # ------------ Core Interface ------------

    async def get(self, key: str, type_: Any = None) -> Any | None:
        """Retrieve a value by key."""
        try:
            data = await self._client.get(self._make_key(key))
        except RedisError as e:
            raise self._failure("get", key, e) from e

        if data is None:
            return None

        return self.codec.decode(data, type_)

    async def has(self, key: str) -> bool:
        """Check if a key exists."""
        try:
            return bool(await self._client.exists(self._make_key(key)))
        except RedisError as e:
            raise self._failure("has", key, e) from e

    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        """Store a value with optional TTL."""
        payload = self._encode(key, value)
        px = self._ttl_milliseconds(ttl) if ttl is not None else None

        try:
            await self._client.set(name=self._make_key(key), value=payload, px=px)
        except RedisError as e:
            raise self._failure("put", key, e) from e

    async def forget(self, key: str) -> None:
        """Delete a single key."""
        try:
            await self._client.delete(self._make_key(key))
        except RedisError as e:
            raise self._failure("forget", key, e) from e

    async def flush(self) -> None:
        """Clear the selected Redis database."""
        try:
            await self._client.flushdb()
        except RedisError as e:
            raise self._failure("flush", None, e) from e

        logger.info("Flushed Redis database", extra={"backend": self.backend})

    async def close(self) -> None:
        """Close the Redis client and release resources."""
        try:
            await self._client.aclose()
            logger.info("Closed Redis cache driver", extra={"backend": self.backend})
        except Exception as e:
            logger.error(
                f"Error closing Redis client: {e}", extra={"backend": self.backend, "error": str(e)}, exc_info=True
            )
        finally:
            # Ensure pool disconnect
            try:
                await self._client.connection_pool.disconnect()
            except Exception as e:
                logger.warning(f"Error disconnecting Redis connection pool: {e}", extra={"error": str(e)})
