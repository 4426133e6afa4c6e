"""CompositeTelemetry — fans every call out to several sinks."""

from __future__ import annotations

import itertools
from typing import TYPE_CHECKING, Any

from ..ports.observability import Telemetry
from .isolated import IsolatedTelemetry

if TYPE_CHECKING:
    from collections.abc import Sequence
    from decimal import Decimal


class CompositeTelemetry(Telemetry):
    """Each sink is isolated, so one failing sink does not starve the others."""

    def __init__(self, sinks: Sequence[Telemetry]) -> None:
        self._sinks = [IsolatedTelemetry(s) for s in sinks]
        self._span_ids = itertools.count(1)
        self._spans: dict[str, list[str]] = {}

    async def record_message_received(
        self, action: str, correlation_id: str, queue_name: str | None
    ) -> None:
        for sink in self._sinks:
            await sink.record_message_received(action, correlation_id, queue_name)

    async def record_message_processed(
        self, action: str, correlation_id: str, duration_ms: float
    ) -> None:
        for sink in self._sinks:
            await sink.record_message_processed(action, correlation_id, duration_ms)

    async def start_span(self, name: str, correlation_id: str) -> str:
        span_id = f"composite-{next(self._span_ids)}"
        self._spans[span_id] = [
            await sink.start_span(name, correlation_id) for sink in self._sinks
        ]
        return span_id

    async def end_span(self, span_id: str, success: bool) -> None:
        child_ids = self._spans.pop(span_id, [])
        for sink, child_id in zip(self._sinks, child_ids):
            await sink.end_span(child_id, success)

    async def record_error(
        self, action: str, correlation_id: str, error_code: str
    ) -> None:
        for sink in self._sinks:
            await sink.record_error(action, correlation_id, error_code)

    async def record_payment(
        self,
        correlation_id: str,
        amount: Decimal,
        currency: str,
        success: bool,
        error_code: str | None = None,
    ) -> None:
        for sink in self._sinks:
            await sink.record_payment(
                correlation_id, amount, currency, success, error_code
            )

    async def record_event(
        self, name: str, correlation_id: str, attributes: dict[str, Any]
    ) -> None:
        for sink in self._sinks:
            await sink.record_event(name, correlation_id, attributes)

    async def record_dispatch_abandoned(
        self, action: str, correlation_id: str, reason: str
    ) -> None:
        for sink in self._sinks:
            await sink.record_dispatch_abandoned(action, correlation_id, reason)
