"""MessageRouter — correlation-preserving dispatch of request envelopes."""

from __future__ import annotations

import asyncio
import logging
import time
from typing import TYPE_CHECKING

from ..correlation import bind_correlation_id
from ..exceptions import MalformedEnvelopeError
from ..models import CallContext, ObpResponse
from ..serialization import EnvelopeSerializer
from ..telemetry import IsolatedTelemetry, NoOpTelemetry
from .handlers import build_dispatch_table

if TYPE_CHECKING:
    from ..models import ObpRequest
    from ..ports.connector import BackendConnector
    from ..ports.counter import CounterStore
    from ..ports.observability import Telemetry
    from .table import DispatchTable

logger = logging.getLogger(__name__)

UNKNOWN_ACTION = "UNKNOWN_ACTION"
MALFORMED_ENVELOPE = "MALFORMED_ENVELOPE"
CBS_ERROR = "CBS_ERROR"

_UNKNOWN = "unknown"


class MessageRouter:
    """Turns one request envelope into exactly one correlated response.

    The router holds no per-dispatch state and does no locking, so any number
    of dispatches may run concurrently. Everything that can go wrong during a
    dispatch is expressed as an error response:

    - unknown action -> ``UNKNOWN_ACTION`` (connector never called);
    - payload rejected by the handler -> ``INVALID_PAYLOAD``;
    - connector reported ``Failure`` -> its code, verbatim;
    - connector raised -> ``CBS_ERROR``.

    Telemetry and counter-store failures are logged and otherwise ignored.
    Cancellation is the one exit without a response: it is reported to
    telemetry as an abandoned dispatch and re-raised.
    """

    def __init__(
        self,
        connector: BackendConnector,
        telemetry: Telemetry | None = None,
        counter_store: CounterStore | None = None,
        *,
        dispatch_table: DispatchTable | None = None,
        serializer: EnvelopeSerializer | None = None,
    ) -> None:
        table = build_dispatch_table() if dispatch_table is None else dispatch_table
        # Incomplete tables are a startup defect, never a runtime one.
        table.freeze()
        self._table = table
        self._connector = connector
        self._telemetry = IsolatedTelemetry(telemetry or NoOpTelemetry())
        self._counters = counter_store
        self._serializer = serializer or EnvelopeSerializer()

    @property
    def dispatch_table(self) -> DispatchTable:
        return self._table

    @property
    def connector(self) -> BackendConnector:
        return self._connector

    @property
    def telemetry(self) -> Telemetry:
        return self._telemetry

    @property
    def counter_store(self) -> CounterStore | None:
        return self._counters

    # ── Entry points ─────────────────────────────────────────────

    async def dispatch(
        self, request: ObpRequest, queue_name: str | None = None
    ) -> ObpResponse:
        """Route one decoded request and return its response."""
        context = CallContext.from_request(request)
        with bind_correlation_id(context.correlation_id):
            return await self._dispatch(request, context, queue_name)

    async def process(
        self, raw: bytes | str, queue_name: str | None = None
    ) -> ObpResponse | None:
        """Decode wire bytes and dispatch them.

        A malformed envelope yields a ``MALFORMED_ENVELOPE`` response when its
        ``messageId`` can be recovered, otherwise ``None`` since there is
        nothing to correlate a response to.
        """
        try:
            request = self._serializer.decode_request(raw)
        except MalformedEnvelopeError as e:
            return await self._malformed(e)
        return await self.dispatch(request, queue_name)

    # ── Dispatch ─────────────────────────────────────────────────

    async def _dispatch(
        self, request: ObpRequest, context: CallContext, queue_name: str | None
    ) -> ObpResponse:
        start = time.monotonic()
        action = request.action
        cid = context.correlation_id
        span_id = ""
        try:
            await self._telemetry.record_message_received(action, cid, queue_name)
            await self._count("inbound", action)
            span_id = await self._telemetry.start_span(f"obp.{action}", cid)

            handler = self._table.get(action)
            if handler is None:
                logger.warning("No handler for action %r (message %s)", action, cid)
                response = ObpResponse.error(
                    UNKNOWN_ACTION, f"Unknown action: {action}", context
                )
                await self._telemetry.record_error(action, cid, UNKNOWN_ACTION)
                return await self._finish(action, response, span_id)

            try:
                response = await handler(
                    request, context, self._connector, self._telemetry
                )
            except Exception as e:  # noqa: BLE001
                logger.exception(
                    "Connector violated its contract for %s (message %s)", action, cid
                )
                response = ObpResponse.error(
                    CBS_ERROR, str(e) or type(e).__name__, context
                )

            if not response.is_success:
                await self._telemetry.record_error(
                    action, cid, response.error_code or CBS_ERROR
                )
            duration_ms = (time.monotonic() - start) * 1000
            await self._telemetry.record_message_processed(action, cid, duration_ms)
            return await self._finish(action, response, span_id)
        except asyncio.CancelledError as e:
            reason = str(e) or "dispatch cancelled"
            logger.warning("Dispatch of %s abandoned: %s", cid, reason)
            await self._telemetry.record_dispatch_abandoned(action, cid, reason)
            await self._telemetry.end_span(span_id, False)
            raise

    async def _finish(
        self, action: str, response: ObpResponse, span_id: str
    ) -> ObpResponse:
        await self._count("outbound", action)
        await self._telemetry.end_span(span_id, response.is_success)
        return response

    async def _malformed(self, error: MalformedEnvelopeError) -> ObpResponse | None:
        if error.message_id is None:
            logger.error("Dropping malformed envelope without messageId: %s", error)
            await self._telemetry.record_error(_UNKNOWN, "", MALFORMED_ENVELOPE)
            return None
        context = CallContext(correlation_id=error.message_id, action=_UNKNOWN)
        with bind_correlation_id(context.correlation_id):
            logger.warning(
                "Malformed envelope %s: %s", context.correlation_id, error
            )
            await self._telemetry.record_error(
                _UNKNOWN, context.correlation_id, MALFORMED_ENVELOPE
            )
            response = ObpResponse.error(MALFORMED_ENVELOPE, str(error), context)
            await self._count("outbound", _UNKNOWN)
            return response

    async def _count(self, direction: str, action: str) -> None:
        if self._counters is None:
            return
        try:
            if direction == "inbound":
                await self._counters.increment_inbound(action)
            else:
                await self._counters.increment_outbound(action)
        except Exception as e:  # noqa: BLE001
            logger.warning("Counter store %s:%s failed: %s", direction, action, e)
