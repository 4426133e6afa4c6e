"""InMemoryTelemetry — records every call, with assertion helpers for tests."""

from __future__ import annotations

import itertools
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

from ..ports.observability import Telemetry

if TYPE_CHECKING:
    from decimal import Decimal


@dataclass(frozen=True)
class TelemetryCall:
    name: str
    args: dict[str, Any] = field(default_factory=dict)


class InMemoryTelemetry(Telemetry):
    """Buffers ``TelemetryCall`` records in call order."""

    def __init__(self) -> None:
        self._calls: list[TelemetryCall] = []
        self._span_ids = itertools.count(1)
        self.open_spans: dict[str, str] = {}

    def _record(self, call: str, /, **args: Any) -> None:
        self._calls.append(TelemetryCall(call, args))

    @property
    def calls(self) -> list[TelemetryCall]:
        return list(self._calls)

    def calls_named(self, name: str) -> list[TelemetryCall]:
        return [c for c in self._calls if c.name == name]

    def names(self) -> list[str]:
        return [c.name for c in self._calls]

    def clear(self) -> None:
        self._calls.clear()
        self.open_spans.clear()

    async def record_message_received(
        self, action: str, correlation_id: str, queue_name: str | None
    ) -> None:
        self._record(
            "record_message_received",
            action=action,
            correlation_id=correlation_id,
            queue_name=queue_name,
        )

    async def record_message_processed(
        self, action: str, correlation_id: str, duration_ms: float
    ) -> None:
        self._record(
            "record_message_processed",
            action=action,
            correlation_id=correlation_id,
            duration_ms=duration_ms,
        )

    async def start_span(self, name: str, correlation_id: str) -> str:
        span_id = f"span-{next(self._span_ids)}"
        self.open_spans[span_id] = name
        self._record(
            "start_span", name=name, correlation_id=correlation_id, span_id=span_id
        )
        return span_id

    async def end_span(self, span_id: str, success: bool) -> None:
        self.open_spans.pop(span_id, None)
        self._record("end_span", span_id=span_id, success=success)

    async def record_error(
        self, action: str, correlation_id: str, error_code: str
    ) -> None:
        self._record(
            "record_error",
            action=action,
            correlation_id=correlation_id,
            error_code=error_code,
        )

    async def record_payment(
        self,
        correlation_id: str,
        amount: Decimal,
        currency: str,
        success: bool,
        error_code: str | None = None,
    ) -> None:
        self._record(
            "record_payment",
            correlation_id=correlation_id,
            amount=amount,
            currency=currency,
            success=success,
            error_code=error_code,
        )

    async def record_event(
        self, name: str, correlation_id: str, attributes: dict[str, Any]
    ) -> None:
        self._record(
            "record_event",
            name=name,
            correlation_id=correlation_id,
            attributes=dict(attributes),
        )

    async def record_dispatch_abandoned(
        self, action: str, correlation_id: str, reason: str
    ) -> None:
        self._record(
            "record_dispatch_abandoned",
            action=action,
            correlation_id=correlation_id,
            reason=reason,
        )
