"""
Cachefront - Configuration Loader

Loads and validates configuration from environment variables and .env files.
Provides a singleton configuration instance for the process.
"""

import logging
import os
from pathlib import Path

from dotenv import load_dotenv
from pydantic import ValidationError

from ..errors import ConfigurationError
from .schemas import CachefrontConfig

logger = logging.getLogger(__name__)

_config_instance: CachefrontConfig | None = None


def load_config(
    env_file: str | None = None,
    reload: bool = False,
) -> CachefrontConfig:
    """
    Load configuration from environment variables and .env file.

    Args:
        env_file: Path to .env file (default: .env in the working directory)
        reload: Force reload even if config already loaded

    Returns:
        Validated CachefrontConfig instance

    Raises:
        ConfigurationError: If configuration is invalid
    """
    global _config_instance

    if _config_instance is not None and not reload:
        return _config_instance

    if env_file:
        env_path = Path(env_file)
    else:
        env_path = Path.cwd() / ".env"

    if env_path.exists():
        logger.info("Loading environment from %s", env_path)
        try:
            load_dotenv(env_path, override=True)
        except Exception as e:
            logger.error(
                f"Failed to load .env file from {env_path}: {e}",
                extra={"path": str(env_path), "error": str(e)},
                exc_info=True,
            )
            raise ConfigurationError(
                f"Failed to load environment file: {e}",
                details={"path": str(env_path), "error": str(e)},
            ) from e
    else:
        logger.debug("No .env file found, using environment variables only")

    # Redis if REDIS_URL is set, else memory
    redis_url = os.getenv("REDIS_URL")
    cache_backend = "redis" if redis_url else "memory"

    config_dict = {
        "environment": os.getenv("ENVIRONMENT", "development"),
        "log_level": os.getenv("LOG_LEVEL", "INFO"),
        "cache": {
            "backend": os.getenv("CACHE_BACKEND", cache_backend),
            "prefix": os.getenv("CACHE_PREFIX", ""),
            "database_url": os.getenv("CACHE_DATABASE_URL", "sqlite+aiosqlite:///./data/cache.db"),
            "redis_url": redis_url,
            "redis_max_connections": os.getenv("REDIS_MAX_CONNECTIONS", "10"),
            "redis_socket_timeout": os.getenv("REDIS_SOCKET_TIMEOUT", "5"),
            "dynamodb_table": os.getenv("DYNAMODB_TABLE", "cache"),
            "dynamodb_key_attribute": os.getenv("DYNAMODB_KEY_ATTRIBUTE", "key"),
            "dynamodb_value_attribute": os.getenv("DYNAMODB_VALUE_ATTRIBUTE", "value"),
            "dynamodb_expiration_attribute": os.getenv("DYNAMODB_EXPIRATION_ATTRIBUTE", "expires_at"),
            "dynamodb_region": os.getenv("AWS_REGION"),
            "dynamodb_endpoint_url": os.getenv("DYNAMODB_ENDPOINT_URL"),
            "aws_access_key_id": os.getenv("AWS_ACCESS_KEY_ID"),
            "aws_secret_access_key": os.getenv("AWS_SECRET_ACCESS_KEY"),
        },
    }

    try:
        _config_instance = CachefrontConfig(**config_dict)  # type: ignore[arg-type]
        logger.info(
            f"Configuration loaded successfully (environment: {_config_instance.environment})",
            extra={"environment": _config_instance.environment, "cache_backend": _config_instance.cache.backend},
        )
        return _config_instance
    except ValidationError as e:
        logger.error(
            f"Configuration validation failed: {e}",
            extra={"validation_errors": e.errors(), "config_dict_keys": list(config_dict.keys())},
            exc_info=True,
        )
        raise ConfigurationError(
            "Configuration validation failed. Check your environment variables and configuration.",
            details={"validation_errors": e.errors()},
        ) from e


def get_config() -> CachefrontConfig:
    """
    Get the current configuration instance, loading it on first access.

    Returns:
        Current CachefrontConfig instance
    """
    if _config_instance is None:
        return load_config()

    return _config_instance


def reload_config(env_file: str | None = None) -> CachefrontConfig:
    """
    Force reload configuration.

    Args:
        env_file: Optional path to .env file

    Returns:
        Reloaded CachefrontConfig instance
    """
    return load_config(env_file=env_file, reload=True)
