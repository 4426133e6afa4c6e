"""Tests for the counter stores (Redis mocked, no real server)."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from redis.exceptions import ConnectionError as RedisConnectionError

from obp_adapter.counters import InMemoryCounterStore, RedisCounterStore
from obp_adapter.exceptions import CounterStoreError
from obp_adapter.ports.counter import CounterStore


class FakeRedis:
    """Just enough of redis.asyncio.Redis for the counter store."""

    def __init__(self) -> None:
        self.data: dict[str, str] = {}

    async def incr(self, key: str) -> int:
        value = int(self.data.get(key, "0")) + 1
        self.data[key] = str(value)
        return value

    async def get(self, key: str) -> str | None:
        return self.data.get(key)

    async def scan_iter(self, match: str | None = None) -> AsyncIterator[str]:
        prefix = (match or "*").rstrip("*")
        for key in list(self.data):
            if key.startswith(prefix):
                yield key

    async def ping(self) -> bool:
        return True


@pytest.fixture
def fake_redis() -> FakeRedis:
    return FakeRedis()


@pytest.fixture
def store(fake_redis: FakeRedis) -> RedisCounterStore:
    return RedisCounterStore(fake_redis, service_name="svc")  # type: ignore[arg-type]


def test_stores_satisfy_the_protocol(store: RedisCounterStore) -> None:
    assert isinstance(store, CounterStore)
    assert isinstance(InMemoryCounterStore(), CounterStore)


def test_key_layout(store: RedisCounterStore) -> None:
    assert store.inbound_key("getBank") == "svc-inbound:getBank"
    assert store.outbound_key("getBank") == "svc-outbound:getBank"


def test_default_service_name() -> None:
    store = RedisCounterStore(MagicMock())
    assert store.inbound_key("x") == "obp-rabbit-cats-adapter-inbound:x"


@pytest.mark.asyncio
async def test_redis_increment_and_read(
    store: RedisCounterStore, fake_redis: FakeRedis
) -> None:
    await store.increment_inbound("getBank")
    await store.increment_inbound("getBank")
    await store.increment_outbound("getBank")
    assert await store.get_inbound_count("getBank") == 2
    assert await store.get_outbound_count("getBank") == 1
    assert fake_redis.data["svc-inbound:getBank"] == "2"


@pytest.mark.asyncio
async def test_redis_missing_key_reads_zero(store: RedisCounterStore) -> None:
    assert await store.get_inbound_count("never") == 0


@pytest.mark.asyncio
async def test_redis_get_all_counts(
    store: RedisCounterStore, fake_redis: FakeRedis
) -> None:
    await store.increment_inbound("getBank")
    await store.increment_outbound("getBank")
    await store.increment_inbound("bogus")
    fake_redis.data["other-service-inbound:getBank"] = "99"
    assert await store.get_all_counts() == {"bogus": (0, 1), "getBank": (1, 1)}


@pytest.mark.asyncio
async def test_redis_bytes_values_are_decoded(store: RedisCounterStore) -> None:
    redis = MagicMock()
    redis.get = AsyncMock(return_value=b"7")
    assert await RedisCounterStore(redis).get_inbound_count("x") == 7


@pytest.mark.asyncio
async def test_redis_non_integer_value(
    store: RedisCounterStore, fake_redis: FakeRedis
) -> None:
    fake_redis.data["svc-inbound:x"] = "seven"
    with pytest.raises(CounterStoreError, match="not an integer"):
        await store.get_inbound_count("x")


@pytest.mark.asyncio
async def test_redis_errors_are_wrapped() -> None:
    redis = MagicMock()
    redis.incr = AsyncMock(side_effect=RedisConnectionError("refused"))
    redis.get = AsyncMock(side_effect=RedisConnectionError("refused"))

    async def scan_iter(**kwargs: Any) -> AsyncIterator[str]:
        raise RedisConnectionError("refused")
        yield  # pragma: no cover

    redis.scan_iter = scan_iter
    store = RedisCounterStore(redis)
    with pytest.raises(CounterStoreError) as exc_info:
        await store.increment_inbound("getBank")
    assert isinstance(exc_info.value.__cause__, RedisConnectionError)
    with pytest.raises(CounterStoreError):
        await store.get_outbound_count("getBank")
    with pytest.raises(CounterStoreError):
        await store.get_all_counts()


@pytest.mark.asyncio
async def test_redis_health_check() -> None:
    redis = MagicMock()
    redis.ping = AsyncMock(return_value=True)
    assert await RedisCounterStore(redis).health_check() is True
    redis.ping = AsyncMock(side_effect=RedisConnectionError("down"))
    assert await RedisCounterStore(redis).health_check() is False


@pytest.mark.asyncio
async def test_in_memory_store() -> None:
    store = InMemoryCounterStore()
    await store.increment_outbound("getBanks")
    await store.increment_inbound("getBanks")
    await store.increment_inbound("getBank")
    assert await store.get_inbound_count("getBanks") == 1
    assert await store.get_outbound_count("getBank") == 0
    assert await store.get_all_counts() == {"getBank": (0, 1), "getBanks": (1, 1)}
    assert await store.health_check() is True


@pytest.mark.asyncio
async def test_in_memory_store_concurrent_increments() -> None:
    store = InMemoryCounterStore()
    await asyncio.gather(*(store.increment_inbound("getBank") for _ in range(100)))
    assert await store.get_inbound_count("getBank") == 100
