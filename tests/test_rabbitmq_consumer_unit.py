"""Unit tests for RabbitMQRequestConsumer with mocked deliveries (no real broker)."""

from __future__ import annotations

import asyncio
import json
from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest

from conftest import wire_request
from obp_adapter.connectors import MockConnector
from obp_adapter.exceptions import MessagingConnectionError
from obp_adapter.models import Success
from obp_adapter.routing import MALFORMED_ENVELOPE, MessageRouter
from obp_adapter.telemetry import InMemoryTelemetry
from obp_adapter.transport import InMemoryResponsePublisher
from obp_adapter.transport.rabbitmq import RabbitMQRequestConsumer


def _delivery(body: bytes, *, reply_to: str | None = None) -> MagicMock:
    raw = MagicMock()
    raw.body = body
    raw.correlation_id = None
    raw.message_id = None
    raw.reply_to = reply_to
    raw.ack = AsyncMock()
    raw.nack = AsyncMock()
    raw.reject = AsyncMock()
    return raw


def _body(**overrides: Any) -> bytes:
    return json.dumps(wire_request(**overrides)).encode()


@pytest.fixture
def mock_connection() -> MagicMock:
    conn = MagicMock()
    conn.health_check = AsyncMock(return_value=True)
    queue = MagicMock()
    queue.consume = AsyncMock(return_value="ctag-1")
    queue.cancel = AsyncMock()
    conn.get_queue = AsyncMock(return_value=queue)
    return conn


@pytest.fixture
def publisher() -> InMemoryResponsePublisher:
    return InMemoryResponsePublisher()


@pytest.fixture
def telemetry() -> InMemoryTelemetry:
    return InMemoryTelemetry()


def _consumer(
    connection: MagicMock,
    publisher: Any,
    connector: Any = None,
    telemetry: InMemoryTelemetry | None = None,
    **kwargs: Any,
) -> RabbitMQRequestConsumer:
    router = MessageRouter(connector or MockConnector(), telemetry)
    return RabbitMQRequestConsumer(connection, router, publisher, **kwargs)


@pytest.mark.asyncio
async def test_start_consumes_request_queue(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    consumer = _consumer(mock_connection, publisher, queue_name="bank.requests")
    await consumer.start()
    mock_connection.get_queue.assert_awaited_once_with("bank.requests")
    queue = mock_connection.get_queue.return_value
    queue.consume.assert_awaited_once()

    await consumer.stop()
    queue.cancel.assert_awaited_once_with("ctag-1")


@pytest.mark.asyncio
async def test_ack_after_publish(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    order: list[str] = []
    raw = _delivery(_body(messageId="m-1"), reply_to="reply.q")
    raw.ack.side_effect = lambda: order.append("ack")
    original_publish = publisher.publish

    async def publish(response: Any, **kwargs: Any) -> None:
        order.append("publish")
        await original_publish(response, **kwargs)

    publisher.publish = publish  # type: ignore[method-assign]
    consumer = _consumer(mock_connection, publisher)
    await consumer.handle_message(raw)

    assert order == ["publish", "ack"]
    publisher.assert_published("m-1", queue="reply.q")
    raw.nack.assert_not_called()
    raw.reject.assert_not_called()
    assert consumer.in_flight == frozenset()


@pytest.mark.asyncio
async def test_publish_failure_requeues(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    publisher.fail_with = MessagingConnectionError("broker gone")
    raw = _delivery(_body())
    await _consumer(mock_connection, publisher).handle_message(raw)
    raw.nack.assert_awaited_once_with(requeue=True)
    raw.ack.assert_not_called()


@pytest.mark.asyncio
async def test_unexpected_publish_error_requeues(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    publisher.fail_with = RuntimeError("channel is closed")
    raw = _delivery(_body(messageId="m-9"))
    consumer = _consumer(mock_connection, publisher)
    await consumer.handle_message(raw)
    raw.nack.assert_awaited_once_with(requeue=True)
    raw.ack.assert_not_called()
    raw.reject.assert_not_called()
    assert consumer.in_flight == frozenset()


@pytest.mark.asyncio
async def test_timeout_rejects_without_response(
    mock_connection: MagicMock,
    publisher: InMemoryResponsePublisher,
    telemetry: InMemoryTelemetry,
) -> None:
    class Slow(MockConnector):
        async def get_banks(self, context: Any) -> Any:
            await asyncio.sleep(60)
            return Success([], context)

    raw = _delivery(_body(messageId="slow-1", action="getBanks"))
    consumer = _consumer(
        mock_connection, publisher, Slow(), telemetry, dispatch_timeout=0.05
    )
    await consumer.handle_message(raw)

    raw.reject.assert_awaited_once_with(requeue=False)
    raw.ack.assert_not_called()
    assert publisher.get_published() == []
    (abandoned,) = telemetry.calls_named("record_dispatch_abandoned")
    assert abandoned.args["correlation_id"] == "slow-1"


@pytest.mark.asyncio
async def test_malformed_with_id_gets_error_response(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    data = wire_request(messageId="bad-1")
    del data["timestamp"]
    raw = _delivery(json.dumps(data).encode())
    await _consumer(mock_connection, publisher).handle_message(raw)
    response = publisher.response_for("bad-1")
    assert response is not None
    assert response.error_code == MALFORMED_ENVELOPE
    raw.ack.assert_awaited_once()


@pytest.mark.asyncio
async def test_uncorrelatable_garbage_is_rejected(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    raw = _delivery(b"\x00garbage")
    await _consumer(mock_connection, publisher).handle_message(raw)
    raw.reject.assert_awaited_once_with(requeue=False)
    assert publisher.get_published() == []


@pytest.mark.asyncio
async def test_duplicate_in_flight_is_not_dispatched_twice(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    release = asyncio.Event()
    calls = 0

    class Gated(MockConnector):
        async def get_banks(self, context: Any) -> Any:
            nonlocal calls
            calls += 1
            await release.wait()
            return Success([], context)

    consumer = _consumer(mock_connection, publisher, Gated())
    first = _delivery(_body(messageId="dup-1", action="getBanks"))
    second = _delivery(_body(messageId="dup-1", action="getBanks"))

    task = asyncio.create_task(consumer.handle_message(first))
    while "dup-1" not in consumer.in_flight:
        await asyncio.sleep(0)
    await consumer.handle_message(second)
    second.ack.assert_awaited_once()

    release.set()
    await task
    assert calls == 1
    publisher.assert_published("dup-1", count=1)


@pytest.mark.asyncio
async def test_concurrency_is_bounded(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    active = 0
    peak = 0

    class Counting(MockConnector):
        async def get_banks(self, context: Any) -> Any:
            nonlocal active, peak
            active += 1
            peak = max(peak, active)
            await asyncio.sleep(0.01)
            active -= 1
            return Success([], context)

    consumer = _consumer(mock_connection, publisher, Counting(), max_concurrency=2)
    for i in range(6):
        await consumer._on_message(
            _delivery(_body(messageId=f"c-{i}", action="getBanks"))
        )
    await consumer.stop()
    assert peak == 2
    assert len(publisher.get_published()) == 6


@pytest.mark.asyncio
async def test_stop_cancels_after_grace_period(
    mock_connection: MagicMock,
    publisher: InMemoryResponsePublisher,
    telemetry: InMemoryTelemetry,
) -> None:
    class Stuck(MockConnector):
        async def get_banks(self, context: Any) -> Any:
            await asyncio.sleep(60)
            return Success([], context)

    consumer = _consumer(
        mock_connection,
        publisher,
        Stuck(),
        telemetry,
        dispatch_timeout=None,
        shutdown_grace_period=0.01,
    )
    raw = _delivery(_body(messageId="stuck-1", action="getBanks"))
    await consumer._on_message(raw)
    await asyncio.sleep(0)
    await consumer.stop()

    raw.ack.assert_not_called()
    (abandoned,) = telemetry.calls_named("record_dispatch_abandoned")
    assert abandoned.args["reason"] == "adapter shutdown"


def test_max_concurrency_must_be_positive(mock_connection: MagicMock) -> None:
    with pytest.raises(ValueError):
        _consumer(mock_connection, InMemoryResponsePublisher(), max_concurrency=0)


@pytest.mark.asyncio
async def test_health_check_delegates_to_connection(
    mock_connection: MagicMock, publisher: InMemoryResponsePublisher
) -> None:
    consumer = _consumer(mock_connection, publisher)
    assert await consumer.health_check() is True
    mock_connection.health_check.assert_awaited_once()
