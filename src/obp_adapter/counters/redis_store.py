"""Redis implementation of the message counter store."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from redis.exceptions import RedisError

from ..exceptions import CounterStoreError
from ..ports.counter import CounterStore

if TYPE_CHECKING:
    from redis.asyncio import Redis

logger = logging.getLogger("obp_adapter.counters.redis")


def _decode(value: bytes | str) -> str:
    return value.decode("utf-8") if isinstance(value, bytes) else value


class RedisCounterStore(CounterStore):
    """
    Counters as plain Redis integer keys.

    Keys are ``<service_name>-inbound:<action>`` and
    ``<service_name>-outbound:<action>``; values are integer strings updated
    with ``INCR``, so concurrent adapters share one set of counters.
    """

    def __init__(
        self, redis_client: Redis, service_name: str = "obp-rabbit-cats-adapter"
    ) -> None:
        """
        Initialize counter store with Redis client.

        Args:
            redis_client: Async Redis client instance.
            service_name: Key namespace, usually the adapter's service name.
        """
        self._redis = redis_client
        self._inbound_prefix = f"{service_name}-inbound:"
        self._outbound_prefix = f"{service_name}-outbound:"

    def inbound_key(self, action: str) -> str:
        return f"{self._inbound_prefix}{action}"

    def outbound_key(self, action: str) -> str:
        return f"{self._outbound_prefix}{action}"

    async def _incr(self, key: str) -> None:
        try:
            await self._redis.incr(key)
        except RedisError as e:
            raise CounterStoreError(f"INCR {key} failed: {e}") from e

    async def _get(self, key: str) -> int:
        try:
            value = await self._redis.get(key)
        except RedisError as e:
            raise CounterStoreError(f"GET {key} failed: {e}") from e
        if value is None:
            return 0
        try:
            return int(_decode(value))
        except ValueError as e:
            raise CounterStoreError(f"Counter {key} is not an integer") from e

    async def _suffixes(self, prefix: str) -> set[str]:
        try:
            return {
                _decode(key)[len(prefix) :]
                async for key in self._redis.scan_iter(match=f"{prefix}*")
            }
        except RedisError as e:
            raise CounterStoreError(f"SCAN {prefix}* failed: {e}") from e

    async def increment_inbound(self, action: str) -> None:
        await self._incr(self.inbound_key(action))

    async def increment_outbound(self, action: str) -> None:
        await self._incr(self.outbound_key(action))

    async def get_inbound_count(self, action: str) -> int:
        return await self._get(self.inbound_key(action))

    async def get_outbound_count(self, action: str) -> int:
        return await self._get(self.outbound_key(action))

    async def get_all_counts(self) -> dict[str, tuple[int, int]]:
        actions = await self._suffixes(self._outbound_prefix)
        actions |= await self._suffixes(self._inbound_prefix)
        counts: dict[str, tuple[int, int]] = {}
        for action in sorted(actions):
            counts[action] = (
                await self.get_outbound_count(action),
                await self.get_inbound_count(action),
            )
        return counts

    async def health_check(self) -> bool:
        try:
            return bool(await self._redis.ping())
        except RedisError:
            logger.warning("Redis counter store is unreachable", exc_info=True)
            return False


def create_redis_client(
    host: str = "localhost",
    port: int = 6379,
    *,
    db: int = 0,
    password: str | None = None,
) -> Redis:
    """Build an asyncio Redis client returning ``str`` values."""
    from redis.asyncio import Redis

    return Redis(host=host, port=port, db=db, password=password, decode_responses=True)
