"""Process-local counters for tests and single-node runs."""

from __future__ import annotations

from collections import Counter

from ..ports.counter import CounterStore


class InMemoryCounterStore(CounterStore):
    def __init__(self) -> None:
        self._inbound: Counter[str] = Counter()
        self._outbound: Counter[str] = Counter()

    async def increment_inbound(self, action: str) -> None:
        self._inbound[action] += 1

    async def increment_outbound(self, action: str) -> None:
        self._outbound[action] += 1

    async def get_inbound_count(self, action: str) -> int:
        return self._inbound[action]

    async def get_outbound_count(self, action: str) -> int:
        return self._outbound[action]

    async def get_all_counts(self) -> dict[str, tuple[int, int]]:
        actions = sorted(set(self._inbound) | set(self._outbound))
        return {a: (self._outbound[a], self._inbound[a]) for a in actions}

    async def health_check(self) -> bool:
        return True
