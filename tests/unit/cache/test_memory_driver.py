"""
Cachefront - Memory Cache Driver Tests

Tests checked-on-read expiration, prefixing, write isolation and the
mutation lock of the in-memory driver.
"""

import asyncio
from typing import Any

import pytest

from cachefront.cache.backends.memory import MemoryDriver
from cachefront.errors import CacheSerializationError


class TestMemoryDriver:
    """Test suite for MemoryDriver."""

    async def test_initialization(self) -> None:
        """Test driver initialization with custom parameters."""
        driver = MemoryDriver(prefix="custom:")

        assert driver.prefix == "custom:"
        assert driver.backend == "memory"
        assert len(driver) == 0

    async def test_set_with_various_types(self, memory_driver: MemoryDriver) -> None:
        """Test storing different data types."""
        test_data: dict[str, Any] = {
            "string": "hello",
            "int": 42,
            "float": 3.14,
            "bool": True,
            "list": [1, 2, 3],
            "dict": {"nested": "value"},
        }

        for key, value in test_data.items():
            await memory_driver.put(key, value)

        for key, expected_value in test_data.items():
            assert await memory_driver.get(key) == expected_value

    async def test_expired_entry_stays_stored(self, memory_driver: MemoryDriver, clock: Any) -> None:
        """Reads report expired entries absent without deleting them."""
        await memory_driver.put("key1", "value1", ttl=1)
        clock.advance(2)

        assert await memory_driver.get("key1") is None
        assert await memory_driver.has("key1") is False
        assert len(memory_driver) == 1

    async def test_overwrite_replaces_stale_entry(self, memory_driver: MemoryDriver, clock: Any) -> None:
        await memory_driver.put("key1", "old", ttl=1)
        clock.advance(2)
        await memory_driver.put("key1", "new")

        assert await memory_driver.get("key1") == "new"
        assert len(memory_driver) == 1

    async def test_ttl_expiration_real_time(self, memory_driver: MemoryDriver) -> None:
        """Test that entries expire after TTL with the real clock."""
        await memory_driver.put("key1", "value1", ttl=0.2)
        assert await memory_driver.has("key1") is True

        await asyncio.sleep(0.4)

        assert await memory_driver.has("key1") is False
        assert await memory_driver.get("key1") is None

    async def test_prefix_isolates_keys(self) -> None:
        driver = MemoryDriver(prefix="a:")
        await driver.put("key", "value")

        assert "a:key" in driver._cache
        assert await driver.get("key") == "value"

    async def test_stored_value_is_a_snapshot(self, memory_driver: MemoryDriver) -> None:
        """Mutating the original object after put does not change the cached copy."""
        original = {"items": [1, 2]}
        await memory_driver.put("key", original)
        original["items"].append(3)

        assert await memory_driver.get("key") == {"items": [1, 2]}

    async def test_flush(self, memory_driver: MemoryDriver) -> None:
        """Test clearing all cache entries."""
        for i in range(5):
            await memory_driver.put(f"key{i}", f"value{i}")

        assert len(memory_driver) == 5

        await memory_driver.flush()

        assert len(memory_driver) == 0
        for i in range(5):
            assert await memory_driver.has(f"key{i}") is False

    async def test_unencodable_value_raises(self, memory_driver: MemoryDriver) -> None:
        with pytest.raises(CacheSerializationError):
            await memory_driver.put("key", object())

        assert await memory_driver.has("key") is False

    async def test_typed_get_mismatch_raises(self, memory_driver: MemoryDriver) -> None:
        await memory_driver.put("key", "not a number")

        with pytest.raises(CacheSerializationError):
            await memory_driver.get("key", int)

    async def test_concurrent_writes(self, memory_driver: MemoryDriver) -> None:
        """Test concurrent put operations on distinct keys."""

        async def write(i: int) -> None:
            await memory_driver.put(f"key{i}", i)

        await asyncio.gather(*(write(i) for i in range(50)))

        assert len(memory_driver) == 50
        for i in range(50):
            assert await memory_driver.get(f"key{i}") == i
