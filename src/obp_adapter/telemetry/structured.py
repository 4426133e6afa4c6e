"""LoggingTelemetry — JSON log entries with correlation context."""

from __future__ import annotations

import json
import logging
import time
import uuid
from typing import TYPE_CHECKING, Any

from ..exceptions import TelemetryError
from ..ports.observability import Telemetry

if TYPE_CHECKING:
    from decimal import Decimal

_log = logging.getLogger("obp_adapter.telemetry")


class LoggingTelemetry(Telemetry):
    """Emits one JSON log entry per telemetry call.

    Spans are kept in memory between ``start_span`` and ``end_span`` only to
    compute their duration.
    """

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._log = logger or _log
        self._spans: dict[str, tuple[str, str, float]] = {}

    def _emit(self, level: int, event: str, **fields: Any) -> None:
        self._write(level, event, {"event": event, **fields})

    def _write(self, level: int, event: str, entry: dict[Any, Any]) -> None:
        try:
            line = json.dumps(entry, default=str)
        except (TypeError, ValueError) as e:
            raise TelemetryError(f"Cannot encode telemetry entry {event!r}: {e}") from e
        self._log.log(level, line)

    async def record_message_received(
        self, action: str, correlation_id: str, queue_name: str | None
    ) -> None:
        self._emit(
            logging.INFO,
            "message.received",
            action=action,
            correlation_id=correlation_id,
            queue=queue_name,
        )

    async def record_message_processed(
        self, action: str, correlation_id: str, duration_ms: float
    ) -> None:
        self._emit(
            logging.INFO,
            "message.processed",
            action=action,
            correlation_id=correlation_id,
            duration_ms=round(duration_ms, 2),
        )

    async def start_span(self, name: str, correlation_id: str) -> str:
        span_id = uuid.uuid4().hex[:16]
        self._spans[span_id] = (name, correlation_id, time.monotonic())
        self._emit(
            logging.DEBUG,
            "span.start",
            span=name,
            span_id=span_id,
            correlation_id=correlation_id,
        )
        return span_id

    async def end_span(self, span_id: str, success: bool) -> None:
        started = self._spans.pop(span_id, None)
        if started is None:
            self._log.debug("end_span for unknown span id %s", span_id)
            return
        name, correlation_id, start = started
        self._emit(
            logging.DEBUG,
            "span.end",
            span=name,
            span_id=span_id,
            correlation_id=correlation_id,
            outcome="success" if success else "error",
            duration_ms=round((time.monotonic() - start) * 1000, 2),
        )

    async def record_error(
        self, action: str, correlation_id: str, error_code: str
    ) -> None:
        self._emit(
            logging.WARNING,
            "message.error",
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
        self._emit(
            logging.INFO,
            "payment.success" if success else "payment.failure",
            correlation_id=correlation_id,
            amount=str(amount),
            currency=currency,
            error_code=error_code,
        )

    async def record_event(
        self, name: str, correlation_id: str, attributes: dict[str, Any]
    ) -> None:
        entry = {**attributes, "event": name, "correlation_id": correlation_id}
        self._write(logging.INFO, name, entry)

    async def record_dispatch_abandoned(
        self, action: str, correlation_id: str, reason: str
    ) -> None:
        self._emit(
            logging.WARNING,
            "message.abandoned",
            action=action,
            correlation_id=correlation_id,
            reason=reason,
        )
