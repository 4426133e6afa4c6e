"""IsolatedTelemetry — guarantees a telemetry sink can never fail a dispatch."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from ..ports.observability import Telemetry

if TYPE_CHECKING:
    from decimal import Decimal

logger = logging.getLogger("obp_adapter.telemetry.isolated")


class IsolatedTelemetry(Telemetry):
    """Delegates to ``inner`` and logs (then drops) anything it raises.

    ``start_span`` falls back to an empty span id, which ``end_span`` ignores.
    """

    def __init__(self, inner: Telemetry) -> None:
        self._inner = inner

    @property
    def inner(self) -> Telemetry:
        return self._inner

    def _failed(self, call: str, exc: Exception) -> None:
        logger.warning("Telemetry call %s failed: %s", call, exc, exc_info=exc)

    async def record_message_received(
        self, action: str, correlation_id: str, queue_name: str | None
    ) -> None:
        try:
            await self._inner.record_message_received(
                action, correlation_id, queue_name
            )
        except Exception as e:  # noqa: BLE001
            self._failed("record_message_received", e)

    async def record_message_processed(
        self, action: str, correlation_id: str, duration_ms: float
    ) -> None:
        try:
            await self._inner.record_message_processed(
                action, correlation_id, duration_ms
            )
        except Exception as e:  # noqa: BLE001
            self._failed("record_message_processed", e)

    async def start_span(self, name: str, correlation_id: str) -> str:
        try:
            return await self._inner.start_span(name, correlation_id)
        except Exception as e:  # noqa: BLE001
            self._failed("start_span", e)
            return ""

    async def end_span(self, span_id: str, success: bool) -> None:
        if not span_id:
            return
        try:
            await self._inner.end_span(span_id, success)
        except Exception as e:  # noqa: BLE001
            self._failed("end_span", e)

    async def record_error(
        self, action: str, correlation_id: str, error_code: str
    ) -> None:
        try:
            await self._inner.record_error(action, correlation_id, error_code)
        except Exception as e:  # noqa: BLE001
            self._failed("record_error", e)

    async def record_payment(
        self,
        correlation_id: str,
        amount: Decimal,
        currency: str,
        success: bool,
        error_code: str | None = None,
    ) -> None:
        try:
            await self._inner.record_payment(
                correlation_id, amount, currency, success, error_code
            )
        except Exception as e:  # noqa: BLE001
            self._failed("record_payment", e)

    async def record_event(
        self, name: str, correlation_id: str, attributes: dict[str, Any]
    ) -> None:
        try:
            await self._inner.record_event(name, correlation_id, attributes)
        except Exception as e:  # noqa: BLE001
            self._failed("record_event", e)

    async def record_dispatch_abandoned(
        self, action: str, correlation_id: str, reason: str
    ) -> None:
        try:
            await self._inner.record_dispatch_abandoned(action, correlation_id, reason)
        except Exception as e:  # noqa: BLE001
            self._failed("record_dispatch_abandoned", e)
