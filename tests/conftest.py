"""
Cachefront - Test Configuration and Shared Fixtures

Provides pytest configuration and shared fixtures for unit and integration tests.
"""

import copy
import os
import socket
from collections.abc import AsyncGenerator, Generator
from datetime import UTC, datetime, timedelta
from pathlib import Path
from typing import Any

import pytest
from botocore.exceptions import ClientError

from cachefront.cache.backends.database import DatabaseDriver
from cachefront.cache.backends.dynamodb import DynamoDBDriver
from cachefront.cache.backends.memory import MemoryDriver

# Set test environment
os.environ["ENVIRONMENT"] = "test"
os.environ["LOG_LEVEL"] = "DEBUG"


def is_redis_available() -> bool:
    """Check if Redis server is available for testing."""
    try:
        sock = socket.socket(socket.AF_INET, socket.SOCK_STREAM)
        sock.settimeout(1)
        result = sock.connect_ex(("localhost", 6379))
        sock.close()
        return result == 0
    except OSError:
        return False


# Skip marker for Redis tests
redis_available = pytest.mark.skipif(not is_redis_available(), reason="Redis server not available")


class FakeClock:
    """Controllable replacement for the drivers' UTC clock."""

    def __init__(self, start: datetime | None = None) -> None:
        self.now = start or datetime(2026, 1, 1, 12, 0, 0, tzinfo=UTC)

    def __call__(self) -> datetime:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += timedelta(seconds=seconds)


class FakeDynamoDBClient:
    """
    In-memory stand-in for the boto3 low-level ``dynamodb`` client.

    Stores items per table keyed by the string partition key and never
    hides expired items, like DynamoDB before its TTL sweeper runs.
    """

    def __init__(self, key_attribute: str = "key") -> None:
        self.key_attribute = key_attribute
        self.tables: dict[str, dict[str, dict[str, Any]]] = {}
        self.calls: list[str] = []
        self.closed = False

    def _pk(self, key: dict[str, Any]) -> str:
        return key[self.key_attribute]["S"]

    def get_item(self, TableName: str, Key: dict[str, Any], ConsistentRead: bool = False) -> dict[str, Any]:
        self.calls.append("get_item")
        item = self.tables.get(TableName, {}).get(self._pk(Key))
        return {"Item": copy.deepcopy(item)} if item is not None else {}

    def put_item(self, TableName: str, Item: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("put_item")
        self.tables.setdefault(TableName, {})[self._pk(Item)] = copy.deepcopy(Item)
        return {}

    def delete_item(self, TableName: str, Key: dict[str, Any]) -> dict[str, Any]:
        self.calls.append("delete_item")
        self.tables.get(TableName, {}).pop(self._pk(Key), None)
        return {}

    def close(self) -> None:
        self.closed = True


class FailingDynamoDBClient(FakeDynamoDBClient):
    """Client whose item operations fail like a missing table."""

    def _fail(self, operation: str) -> None:
        raise ClientError(
            {"Error": {"Code": "ResourceNotFoundException", "Message": "Requested resource not found"}},
            operation,
        )

    def get_item(self, TableName: str, Key: dict[str, Any], ConsistentRead: bool = False) -> dict[str, Any]:
        self._fail("GetItem")
        return {}

    def put_item(self, TableName: str, Item: dict[str, Any]) -> dict[str, Any]:
        self._fail("PutItem")
        return {}


@pytest.fixture
def clock(monkeypatch: pytest.MonkeyPatch) -> FakeClock:
    """Freeze the drivers' clock; advance it with ``clock.advance(seconds)``."""
    fake = FakeClock()
    monkeypatch.setattr("cachefront.cache.interface._utcnow", fake)
    return fake


@pytest.fixture
def test_redis_url() -> str:
    """Get Redis URL for testing (database 15 for isolation)."""
    return os.environ.get("TEST_REDIS_URL", "redis://localhost:6379/15")


@pytest.fixture
def sqlite_url(tmp_path: Path) -> str:
    """SQLite database file isolated per test."""
    return f"sqlite+aiosqlite:///{tmp_path / 'cache.db'}"


@pytest.fixture
def memory_driver() -> MemoryDriver:
    return MemoryDriver()


@pytest.fixture
async def database_driver(sqlite_url: str) -> AsyncGenerator[DatabaseDriver, None]:
    driver = DatabaseDriver(database_url=sqlite_url)
    yield driver
    await driver.close()


@pytest.fixture
def fake_dynamodb_client_cls() -> type[FakeDynamoDBClient]:
    """The fake client class, for tests that need custom key attributes."""
    return FakeDynamoDBClient


@pytest.fixture
def dynamodb_client() -> FakeDynamoDBClient:
    return FakeDynamoDBClient()


@pytest.fixture
def dynamodb_driver(dynamodb_client: FakeDynamoDBClient) -> DynamoDBDriver:
    return DynamoDBDriver(table="cache", client=dynamodb_client)


@pytest.fixture
def failing_dynamodb_driver() -> DynamoDBDriver:
    return DynamoDBDriver(table="cache", client=FailingDynamoDBClient())


@pytest.fixture
def mock_env_memory(monkeypatch: pytest.MonkeyPatch) -> None:
    """Set environment variables for memory cache backend."""
    monkeypatch.delenv("REDIS_URL", raising=False)
    monkeypatch.setenv("CACHE_BACKEND", "memory")
    monkeypatch.setenv("CACHE_PREFIX", "test:")


@pytest.fixture(autouse=True)
def reset_global_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Reset the config singleton and cache registry to prevent state leakage."""
    monkeypatch.setattr("cachefront.config.loader._config_instance", None)
    yield
    from cachefront.cache.factory import reset_cache_factory

    reset_cache_factory()
