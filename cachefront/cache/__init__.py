"""
Cachefront - Cache Module

Provides the Cache facade, the driver interface and the factory.

Usage:
    from cachefront.cache import create_cache

    cache = create_cache()
    await cache.put("key", "value", ttl=3600)
    value = await cache.get("key")
"""

from .backends import MemoryDriver, NullDriver
from .facade import Cache
from .factory import (
    close_all_caches,
    create_cache,
    create_driver,
    get_cache,
    list_cache_instances,
    reset_cache_factory,
)
from .interface import CacheDriver
from .serialization import JsonCodec

__all__ = [
    # Facade
    "Cache",
    # Factory functions
    "create_cache",
    "create_driver",
    "get_cache",
    "close_all_caches",
    "list_cache_instances",
    "reset_cache_factory",
    # Interface
    "CacheDriver",
    "JsonCodec",
    # Drivers without optional dependencies
    "MemoryDriver",
    "NullDriver",
]
