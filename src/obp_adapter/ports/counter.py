"""Port for per-action inbound/outbound message counters."""

from __future__ import annotations

from typing import Protocol, runtime_checkable


@runtime_checkable
class CounterStore(Protocol):
    """
    Port for auxiliary throughput counters keyed by action name.

    Counters are monotonically increasing integers. This is a side-observation
    mechanism: the router treats any failure here as a logged warning.
    """

    async def increment_inbound(self, action: str) -> None: ...

    async def increment_outbound(self, action: str) -> None: ...

    async def get_inbound_count(self, action: str) -> int: ...

    async def get_outbound_count(self, action: str) -> int: ...

    async def get_all_counts(self) -> dict[str, tuple[int, int]]:
        """
        Return ``{action: (outbound, inbound)}`` for every action seen in either
        direction; a missing side counts as zero.
        """
        ...
