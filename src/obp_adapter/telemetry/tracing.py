"""OpenTelemetryTelemetry: spans and span events through the OpenTelemetry API.

Requires the optional ``[opentelemetry]`` extra. Exporter and SDK setup are
left to the deployment; without an SDK the API hands out non-recording spans.
"""

from __future__ import annotations

import uuid
from typing import TYPE_CHECKING, Any

from opentelemetry import context as otel_context
from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

from .. import __version__
from ..ports.observability import Telemetry

if TYPE_CHECKING:
    from contextvars import Token
    from decimal import Decimal

    from opentelemetry.trace import Span, Tracer


class OpenTelemetryTelemetry(Telemetry):
    """One span per dispatch; errors, payments and events become span events.

    The span is the current span between ``start_span`` and ``end_span``, so
    spans a connector opens during the call are its children. A
    ``message.received`` reported before the span starts is held and attached
    once it does. Other events go to the most recent open span for the same
    correlation id and are dropped when there is none.
    """

    def __init__(self, tracer: Tracer | None = None) -> None:
        self._tracer = tracer or trace.get_tracer("obp-adapter", __version__)
        self._spans: dict[str, Span] = {}
        self._tokens: dict[str, Token[Any]] = {}
        self._by_correlation: dict[str, list[str]] = {}
        self._received: dict[str, dict[str, str]] = {}

    def _current(self, correlation_id: str) -> Span | None:
        span_ids = self._by_correlation.get(correlation_id)
        if not span_ids:
            return None
        return self._spans.get(span_ids[-1])

    @staticmethod
    def _attributes(attributes: dict[str, Any]) -> dict[str, str]:
        return {k: str(v) for k, v in attributes.items() if v is not None}

    def _add_event(
        self, correlation_id: str, name: str, attributes: dict[str, Any]
    ) -> None:
        span = self._current(correlation_id)
        if span is None:
            return
        span.add_event(name, self._attributes(attributes))

    async def record_message_received(
        self, action: str, correlation_id: str, queue_name: str | None
    ) -> None:
        attributes = self._attributes({"action": action, "queue": queue_name})
        span = self._current(correlation_id)
        if span is None:
            self._received[correlation_id] = attributes
        else:
            span.add_event("message.received", attributes)

    async def record_message_processed(
        self, action: str, correlation_id: str, duration_ms: float
    ) -> None:
        span = self._current(correlation_id)
        if span is not None:
            span.set_attribute("obp.duration_ms", duration_ms)

    async def start_span(self, name: str, correlation_id: str) -> str:
        span = self._tracer.start_span(
            name, attributes={"obp.correlation_id": correlation_id}
        )
        received = self._received.pop(correlation_id, None)
        if received is not None:
            span.add_event("message.received", received)
        span_id = uuid.uuid4().hex
        self._spans[span_id] = span
        self._tokens[span_id] = otel_context.attach(trace.set_span_in_context(span))
        self._by_correlation.setdefault(correlation_id, []).append(span_id)
        return span_id

    async def end_span(self, span_id: str, success: bool) -> None:
        span = self._spans.pop(span_id, None)
        if span is None:
            return
        token = self._tokens.pop(span_id, None)
        if token is not None:
            otel_context.detach(token)
        for correlation_id, span_ids in list(self._by_correlation.items()):
            if span_id in span_ids:
                span_ids.remove(span_id)
                if not span_ids:
                    del self._by_correlation[correlation_id]
                break
        span.set_attribute("obp.outcome", "success" if success else "error")
        span.set_status(Status(StatusCode.OK if success else StatusCode.ERROR))
        span.end()

    async def record_error(
        self, action: str, correlation_id: str, error_code: str
    ) -> None:
        self._add_event(
            correlation_id,
            "message.error",
            {"action": action, "error_code": error_code},
        )

    async def record_payment(
        self,
        correlation_id: str,
        amount: Decimal,
        currency: str,
        success: bool,
        error_code: str | None = None,
    ) -> None:
        self._add_event(
            correlation_id,
            "payment.success" if success else "payment.failure",
            {"amount": amount, "currency": currency, "error_code": error_code},
        )

    async def record_event(
        self, name: str, correlation_id: str, attributes: dict[str, Any]
    ) -> None:
        self._add_event(correlation_id, name, attributes)

    async def record_dispatch_abandoned(
        self, action: str, correlation_id: str, reason: str
    ) -> None:
        self._received.pop(correlation_id, None)
        self._add_event(
            correlation_id, "message.abandoned", {"action": action, "reason": reason}
        )
