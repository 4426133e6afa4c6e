"""Message counter stores (Redis and in-memory)."""

from __future__ import annotations

from .memory import InMemoryCounterStore
from .redis_store import RedisCounterStore, create_redis_client

__all__ = [
    "InMemoryCounterStore",
    "RedisCounterStore",
    "create_redis_client",
]
