"""
Cachefront - Cache Factory

Builds drivers and Cache facades from a typed CacheConfig and keeps a
registry of named cache instances.

Key points:
- Backend selected with CACHE_BACKEND=memory|database|redis|dynamodb|null
  (memory by default, redis when REDIS_URL is set)
- Client libraries for Redis and DynamoDB are imported only when selected
- All configuration is typed and validated via Pydantic models

Examples:
    from cachefront.cache.factory import create_cache

    # Uses env-configured backend (memory by default)
    cache = create_cache()

    # Or explicitly supply a CacheConfig (e.g., for tests)
    from cachefront.config import CacheBackend, CacheConfig
    cfg = CacheConfig(backend=CacheBackend.DATABASE, database_url="sqlite+aiosqlite:///./cache.db")
    db_cache = create_cache(cfg, name="db")
"""

from __future__ import annotations

import logging

from ..config import CacheBackend, CacheConfig, get_config
from ..errors import ConfigurationError
from .backends.memory import MemoryDriver
from .backends.null import NullDriver
from .facade import Cache
from .interface import CacheDriver

logger = logging.getLogger(__name__)

# Global cache instances registry
_cache_instances: dict[str, Cache] = {}


def _missing_dependency(backend: str, package: str, error: ImportError) -> ConfigurationError:
    logger.error(
        f"{backend} backend selected but {package} is not installed",
        extra={"package": package, "backend": backend, "error": str(error)},
    )
    return ConfigurationError(
        f"{backend} backend selected but its client library is unavailable. Install with: pip install '{package}'",
        details={"package": package, "error": str(error), "backend": backend},
    )


def _create_database_driver(config: CacheConfig) -> CacheDriver:
    try:
        from .backends.database import DatabaseDriver
    except ImportError as e:
        raise _missing_dependency("database", "sqlalchemy[asyncio]", e) from e

    return DatabaseDriver(database_url=config.database_url, prefix=config.prefix)


def _create_redis_driver(config: CacheConfig) -> CacheDriver:
    if not config.redis_url:
        raise ConfigurationError(
            "REDIS_URL must be set when CACHE_BACKEND=redis",
            details={"env": "REDIS_URL", "backend": "redis"},
        )

    try:
        from .backends.redis import RedisDriver
    except ImportError as e:
        raise _missing_dependency("redis", "redis>=5.0.0", e) from e

    return RedisDriver(
        redis_url=config.redis_url,
        prefix=config.prefix,
        max_connections=config.redis_max_connections,
        socket_timeout=config.redis_socket_timeout,
    )


def _create_dynamodb_driver(config: CacheConfig) -> CacheDriver:
    try:
        from .backends.dynamodb import DynamoDBDriver
    except ImportError as e:
        raise _missing_dependency("dynamodb", "boto3", e) from e

    return DynamoDBDriver(
        table=config.dynamodb_table,
        prefix=config.prefix,
        key_attribute=config.dynamodb_key_attribute,
        value_attribute=config.dynamodb_value_attribute,
        expiration_attribute=config.dynamodb_expiration_attribute,
        region=config.dynamodb_region,
        endpoint_url=config.dynamodb_endpoint_url,
        access_key=config.aws_access_key_id,
        secret_key=config.aws_secret_access_key,
    )


def create_driver(config: CacheConfig) -> CacheDriver:
    """
    Build the driver selected by ``config.backend``.

    Raises:
        ConfigurationError: If the backend is unknown, misconfigured or its
            client library is missing
    """
    try:
        backend = CacheBackend(config.backend)
    except ValueError as e:
        raise ConfigurationError(
            f"Unknown cache backend: {config.backend}",
            details={"backend": str(config.backend), "supported": [b.value for b in CacheBackend]},
        ) from e

    if backend == CacheBackend.MEMORY:
        return MemoryDriver(prefix=config.prefix)
    if backend == CacheBackend.NULL:
        return NullDriver(prefix=config.prefix)
    if backend == CacheBackend.DATABASE:
        return _create_database_driver(config)
    if backend == CacheBackend.REDIS:
        return _create_redis_driver(config)
    return _create_dynamodb_driver(config)


def create_cache(
    config: CacheConfig | None = None,
    name: str = "default",
) -> Cache:
    """
    Create a Cache facade backed by the configured driver.

    Args:
        config: Cache configuration (uses global config if not provided)
        name: Cache instance name (for multiple cache instances)

    Returns:
        The registered Cache for ``name``; an existing instance is returned
        as-is and ``config`` is ignored

    Raises:
        ConfigurationError: If cache configuration is invalid or backend unavailable
    """
    if name in _cache_instances:
        logger.debug("Returning existing cache instance: %s", name)
        return _cache_instances[name]

    if config is None:
        config = get_config().cache

    logger.info(
        "Creating cache instance '%s' with backend: %s",
        name,
        config.backend,
        extra={"cache_name": name, "backend": str(config.backend)},
    )

    try:
        cache = Cache(create_driver(config))
    except ConfigurationError:
        raise
    except Exception as e:
        logger.error(
            "Unexpected error creating cache instance '%s': %s",
            name,
            e,
            extra={"cache_name": name, "backend": str(config.backend), "error": str(e)},
            exc_info=True,
        )
        raise ConfigurationError(
            f"Failed to create cache instance '{name}': {e}",
            details={"cache_name": name, "backend": str(config.backend), "error": str(e)},
        ) from e

    _cache_instances[name] = cache
    logger.info(
        "Cache instance '%s' created successfully",
        name,
        extra={"cache_name": name, "backend": str(config.backend)},
    )
    return cache


def get_cache(name: str = "default") -> Cache:
    """
    Get an existing cache instance by name.

    If the instance doesn't exist, it is created from the global configuration.
    """
    if name not in _cache_instances:
        logger.debug("Cache instance '%s' not found, creating new instance", name)
        return create_cache(name=name)

    return _cache_instances[name]


async def close_all_caches() -> None:
    """
    Close all cache instances and release resources.

    Call during graceful shutdown. A failure closing one instance is logged
    and does not prevent closing the others.
    """
    if not _cache_instances:
        logger.debug("No cache instances to close")
        return

    logger.info("Closing %d cache instance(s)...", len(_cache_instances))

    for name, cache in list(_cache_instances.items()):
        try:
            await cache.close()
            logger.info("Closed cache instance: %s", name)
        except Exception as e:
            logger.error(
                "Error closing cache instance '%s': %s",
                name,
                e,
                extra={"cache_name": name, "error": str(e)},
                exc_info=True,
            )

    _cache_instances.clear()
    logger.info("All cache instances closed")


def reset_cache_factory() -> None:
    """
    Clear all instance references without closing them.

    Warning: Only use this in testing contexts; use close_all_caches() for cleanup.
    """
    count = len(_cache_instances)
    _cache_instances.clear()
    logger.debug("Reset cache factory, cleared %d instance reference(s)", count)


def list_cache_instances() -> list[str]:
    """List all registered cache instance names."""
    return list(_cache_instances.keys())
