"""
Cachefront - Cache Facade Tests

Composed operations are checked against a MemoryDriver subclass that
records which primitives were called.
"""

from datetime import timedelta
from typing import Any

import pytest
from pydantic import BaseModel

from cachefront.cache.backends.memory import MemoryDriver
from cachefront.cache.facade import Cache


class RecordingDriver(MemoryDriver):
    """Memory driver that logs primitive calls."""

    def __init__(self) -> None:
        super().__init__()
        self.calls: list[tuple[Any, ...]] = []

    async def get(self, key: str, type_: Any = None) -> Any | None:
        self.calls.append(("get", key))
        return await super().get(key, type_)

    async def has(self, key: str) -> bool:
        self.calls.append(("has", key))
        return await super().has(key)

    async def put(self, key: str, value: Any, ttl: float | None = None) -> None:
        self.calls.append(("put", key, ttl))
        await super().put(key, value, ttl)

    async def forget(self, key: str) -> None:
        self.calls.append(("forget", key))
        await super().forget(key)

    async def flush(self) -> None:
        self.calls.append(("flush",))
        await super().flush()


class User(BaseModel):
    id: int
    name: str


@pytest.fixture
def driver() -> RecordingDriver:
    return RecordingDriver()


@pytest.fixture
def cache(driver: RecordingDriver) -> Cache:
    return Cache(driver)


class TestDelegation:
    """One-to-one operations."""

    async def test_put_converts_ttl_to_seconds(self, cache: Cache, driver: RecordingDriver) -> None:
        await cache.put("a", 1, 10)
        await cache.put("b", 2, timedelta(minutes=2))
        await cache.put("c", 3)

        assert driver.calls == [("put", "a", 10.0), ("put", "b", 120.0), ("put", "c", None)]

    async def test_forever_stores_without_expiration(self, cache: Cache, driver: RecordingDriver) -> None:
        await cache.forever("key", "value")

        assert driver.calls == [("put", "key", None)]
        assert await cache.get("key") == "value"

    @pytest.mark.parametrize("ttl", [0, -5, timedelta(0)])
    async def test_non_positive_ttl_forgets(self, cache: Cache, driver: RecordingDriver, ttl: Any) -> None:
        await cache.forever("key", "old")
        driver.calls.clear()

        await cache.put("key", "new", ttl)

        assert driver.calls == [("forget", "key")]
        assert await cache.has("key") is False

    async def test_get_default(self, cache: Cache) -> None:
        assert await cache.get("missing", "fallback") == "fallback"

        await cache.put("present", "value", 10)
        assert await cache.get("present", "fallback") == "value"

    async def test_typed_get(self, cache: Cache) -> None:
        await cache.put("user", User(id=1, name="Ada"), 60)

        assert await cache.get("user") == {"id": 1, "name": "Ada"}
        assert await cache.get("user", type_=User) == User(id=1, name="Ada")

    async def test_flush(self, cache: Cache, driver: RecordingDriver) -> None:
        await cache.put("key", "value", 10)
        await cache.flush()

        assert driver.calls[-1] == ("flush",)
        assert await cache.has("key") is False

    async def test_context_manager_closes_driver(self, driver: RecordingDriver) -> None:
        closed: list[bool] = []

        async def close() -> None:
            closed.append(True)

        driver.close = close  # type: ignore[method-assign]

        async with Cache(driver) as cache:
            await cache.put("key", "value", 10)

        assert closed == [True]


class TestRemember:
    """Read-or-populate."""

    async def test_returns_existing_value_without_writing(self, cache: Cache, driver: RecordingDriver) -> None:
        await cache.put("key", "cached", 60)
        driver.calls.clear()

        assert await cache.remember("key", 60, "fresh") == "cached"
        assert driver.calls == [("get", "key")]

    async def test_stores_value_on_miss(self, cache: Cache, driver: RecordingDriver) -> None:
        assert await cache.remember("key", 30, "fresh") == "fresh"

        assert driver.calls == [("get", "key"), ("put", "key", 30.0)]
        assert await cache.get("key") == "fresh"

    async def test_callable_only_runs_on_miss(self, cache: Cache) -> None:
        calls: list[int] = []

        def compute() -> str:
            calls.append(1)
            return "computed"

        assert await cache.remember("key", 30, compute) == "computed"
        assert await cache.remember("key", 30, compute) == "computed"
        assert calls == [1]

    async def test_async_callable(self, cache: Cache) -> None:
        async def load_user() -> User:
            return User(id=7, name="Grace")

        assert await cache.remember("user", timedelta(minutes=5), load_user) == User(id=7, name="Grace")
        assert await cache.remember("user", 60, load_user, type_=User) == User(id=7, name="Grace")

    async def test_expired_value_is_recomputed(self, cache: Cache, clock: Any) -> None:
        await cache.remember("key", 5, "first")
        clock.advance(10)

        assert await cache.remember("key", 5, "second") == "second"

    async def test_remember_forever(self, cache: Cache, driver: RecordingDriver, clock: Any) -> None:
        assert await cache.remember_forever("key", lambda: "value") == "value"
        assert driver.calls[-1] == ("put", "key", None)

        clock.advance(10**6)
        assert await cache.remember_forever("key", "other") == "value"


class TestPull:
    """Read-and-delete."""

    async def test_returns_and_removes(self, cache: Cache, driver: RecordingDriver) -> None:
        await cache.put("key", "value", 60)
        driver.calls.clear()

        assert await cache.pull("key") == "value"
        assert driver.calls == [("get", "key"), ("forget", "key")]
        assert await cache.has("key") is False

    async def test_absent_key_skips_forget(self, cache: Cache, driver: RecordingDriver) -> None:
        assert await cache.pull("missing", "fallback") == "fallback"
        assert driver.calls == [("get", "missing")]


class TestAdd:
    """Set-if-absent."""

    async def test_stores_when_absent(self, cache: Cache, driver: RecordingDriver) -> None:
        assert await cache.add("key", "value", 10) is True

        assert driver.calls == [("has", "key"), ("put", "key", 10.0)]
        assert await cache.get("key") == "value"

    async def test_keeps_existing_value(self, cache: Cache, driver: RecordingDriver) -> None:
        await cache.put("key", "original", 10)
        driver.calls.clear()

        assert await cache.add("key", "replacement", 10) is False
        assert driver.calls == [("has", "key")]
        assert await cache.get("key") == "original"

    async def test_expired_key_counts_as_absent(self, cache: Cache, clock: Any) -> None:
        await cache.put("key", "old", 1)
        clock.advance(2)

        assert await cache.add("key", "new", 10) is True
        assert await cache.get("key") == "new"

    async def test_non_positive_ttl_does_not_write(self, cache: Cache, driver: RecordingDriver) -> None:
        assert await cache.add("key", "value", 0) is False
        assert driver.calls == []
