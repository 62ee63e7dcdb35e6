"""
Cachefront - Expiration-aware key-value cache facade.

One Cache API over interchangeable drivers: memory, database (SQLAlchemy),
Redis, DynamoDB and a no-op driver.
"""

from .cache import (
    Cache,
    CacheDriver,
    JsonCodec,
    MemoryDriver,
    NullDriver,
    close_all_caches,
    create_cache,
    create_driver,
    get_cache,
)
from .errors import (
    CacheConnectionError,
    CacheDataFormatError,
    CacheError,
    CachefrontError,
    CacheSerializationError,
    CacheWriteConflictError,
    ConfigurationError,
    UnsupportedOperationError,
)

__version__ = "0.1.0"

__all__ = [
    "Cache",
    "CacheDriver",
    "JsonCodec",
    "MemoryDriver",
    "NullDriver",
    "create_cache",
    "create_driver",
    "get_cache",
    "close_all_caches",
    "CachefrontError",
    "ConfigurationError",
    "CacheError",
    "CacheConnectionError",
    "CacheSerializationError",
    "CacheWriteConflictError",
    "CacheDataFormatError",
    "UnsupportedOperationError",
]
