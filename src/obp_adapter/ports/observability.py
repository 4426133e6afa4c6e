"""Telemetry — observability port consumed by the router."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from decimal import Decimal


@runtime_checkable
class Telemetry(Protocol):
    """
    Port for observability sinks (logs, tracing backends, metrics exporters).

    All calls are fire-and-forget from the router's point of view: the router
    wraps implementations so a failing sink is logged and never changes the
    outcome of a dispatch.
    """

    async def record_message_received(
        self, action: str, correlation_id: str, queue_name: str | None
    ) -> None: ...

    async def record_message_processed(
        self, action: str, correlation_id: str, duration_ms: float
    ) -> None: ...

    async def start_span(self, name: str, correlation_id: str) -> str:
        """Open a span and return its id, to be passed to ``end_span``."""
        ...

    async def end_span(self, span_id: str, success: bool) -> None: ...

    async def record_error(
        self, action: str, correlation_id: str, error_code: str
    ) -> None: ...

    async def record_payment(
        self,
        correlation_id: str,
        amount: Decimal,
        currency: str,
        success: bool,
        error_code: str | None = None,
    ) -> None:
        """Payment outcome, recorded only after the connector has returned."""
        ...

    async def record_event(
        self, name: str, correlation_id: str, attributes: dict[str, Any]
    ) -> None: ...

    async def record_dispatch_abandoned(
        self, action: str, correlation_id: str, reason: str
    ) -> None:
        """Dispatch was cancelled (timeout or shutdown); no response was produced."""
        ...
