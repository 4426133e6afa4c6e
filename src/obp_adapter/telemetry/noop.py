"""Telemetry sink that discards everything."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from ..ports.observability import Telemetry

if TYPE_CHECKING:
    from decimal import Decimal


class NoOpTelemetry(Telemetry):
    async def record_message_received(
        self, action: str, correlation_id: str, queue_name: str | None
    ) -> None:
        return None

    async def record_message_processed(
        self, action: str, correlation_id: str, duration_ms: float
    ) -> None:
        return None

    async def start_span(self, name: str, correlation_id: str) -> str:
        return ""

    async def end_span(self, span_id: str, success: bool) -> None:
        return None

    async def record_error(
        self, action: str, correlation_id: str, error_code: str
    ) -> None:
        return None

    async def record_payment(
        self,
        correlation_id: str,
        amount: Decimal,
        currency: str,
        success: bool,
        error_code: str | None = None,
    ) -> None:
        return None

    async def record_event(
        self, name: str, correlation_id: str, attributes: dict[str, Any]
    ) -> None:
        return None

    async def record_dispatch_abandoned(
        self, action: str, correlation_id: str, reason: str
    ) -> None:
        return None
