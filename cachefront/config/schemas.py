"""
Cachefront - Configuration Schemas

Defines typed configuration models using Pydantic for validation and type safety.
Backend-specific settings live on CacheConfig and are only read by the
driver they belong to.
"""

from enum import Enum
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator


class Environment(str, Enum):
    """Runtime environment."""

    DEVELOPMENT = "development"
    STAGING = "staging"
    PRODUCTION = "production"
    TEST = "test"


class CacheBackend(str, Enum):
    """Supported cache backends."""

    MEMORY = "memory"
    DATABASE = "database"
    REDIS = "redis"
    DYNAMODB = "dynamodb"
    NULL = "null"


class LogLevel(str, Enum):
    """Log levels."""

    DEBUG = "DEBUG"
    INFO = "INFO"
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


class CacheConfig(BaseModel):
    """Cache configuration."""

    backend: CacheBackend = Field(default=CacheBackend.MEMORY, description="Cache backend to use")
    prefix: str = Field(default="", description="Prefix prepended to every cache key")

    # Database-specific settings (only used when backend=database)
    database_url: str = Field(
        default="sqlite+aiosqlite:///./data/cache.db",
        description="SQLAlchemy async database URL",
    )

    # Redis-specific settings (only used when backend=redis)
    redis_url: str | None = Field(default=None, validate_default=True, description="Redis connection URL")
    redis_max_connections: int = Field(default=10, ge=1, description="Redis connection pool size")
    redis_socket_timeout: int = Field(default=5, ge=1, description="Redis socket timeout in seconds")

    # DynamoDB-specific settings (only used when backend=dynamodb)
    dynamodb_table: str = Field(default="cache", description="DynamoDB table name")
    dynamodb_key_attribute: str = Field(default="key", description="Partition key attribute name")
    dynamodb_value_attribute: str = Field(default="value", description="Binary payload attribute name")
    dynamodb_expiration_attribute: str = Field(
        default="expires_at",
        description="Epoch-seconds expiration attribute name (the table's TTL attribute)",
    )
    dynamodb_region: str | None = Field(default=None, description="AWS region")
    dynamodb_endpoint_url: str | None = Field(default=None, description="Custom endpoint (e.g. DynamoDB Local)")
    aws_access_key_id: str | None = Field(default=None, description="Optional; uses env/IAM if not set")
    aws_secret_access_key: str | None = Field(default=None, description="Optional; uses env/IAM if not set")

    @field_validator("redis_url")
    @classmethod
    def validate_redis_url(cls, v: str | None, info: Any) -> str | None:
        """Ensure redis_url is provided when backend is redis."""
        backend = info.data.get("backend")
        if backend == CacheBackend.REDIS and not v:
            raise ValueError("redis_url is required when cache backend is 'redis'")
        return v


class CachefrontConfig(BaseModel):
    """Root configuration for Cachefront."""

    environment: Environment = Field(default=Environment.DEVELOPMENT, description="Runtime environment")
    log_level: LogLevel = Field(default=LogLevel.INFO, description="Logging level")

    cache: CacheConfig = Field(default_factory=CacheConfig)

    @field_validator("log_level", mode="before")
    @classmethod
    def normalize_log_level(cls, v: Any) -> Any:
        """Accept level names in any case (LOG_LEVEL=info)."""
        return v.upper() if isinstance(v, str) else v

    model_config = ConfigDict(use_enum_values=True, validate_assignment=True)
