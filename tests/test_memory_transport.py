"""Tests for the in-memory transport."""

from __future__ import annotations

import json

import pytest

from conftest import make_request, wire_request
from obp_adapter.exceptions import MessagingConnectionError
from obp_adapter.models import CallContext, ObpResponse
from obp_adapter.ports.messaging import RequestConsumer, ResponsePublisher
from obp_adapter.routing import MessageRouter
from obp_adapter.transport import InMemoryRequestConsumer, InMemoryResponsePublisher


@pytest.fixture
def publisher() -> InMemoryResponsePublisher:
    return InMemoryResponsePublisher()


@pytest.fixture
def consumer(
    router: MessageRouter, publisher: InMemoryResponsePublisher
) -> InMemoryRequestConsumer:
    return InMemoryRequestConsumer(router, publisher)


def test_ports_are_satisfied(
    consumer: InMemoryRequestConsumer, publisher: InMemoryResponsePublisher
) -> None:
    assert isinstance(consumer, RequestConsumer)
    assert isinstance(publisher, ResponsePublisher)


@pytest.mark.asyncio
async def test_submit_request_model(
    consumer: InMemoryRequestConsumer, publisher: InMemoryResponsePublisher
) -> None:
    response = await consumer.submit(
        make_request("getBank", {"bankId": "gh.29.uk"}, message_id="m-1")
    )
    assert response is not None and response.is_success
    publisher.assert_published("m-1")
    publisher.assert_published("m-1", queue="obp.response")
    assert publisher.responses == [response]


@pytest.mark.asyncio
async def test_submit_raw_bytes_and_str(
    consumer: InMemoryRequestConsumer, publisher: InMemoryResponsePublisher
) -> None:
    await consumer.submit(json.dumps(wire_request(messageId="b-1")).encode())
    await consumer.submit(json.dumps(wire_request(messageId="s-1")))
    publisher.assert_published("b-1")
    publisher.assert_published("s-1")


@pytest.mark.asyncio
async def test_uncorrelatable_input_publishes_nothing(
    consumer: InMemoryRequestConsumer, publisher: InMemoryResponsePublisher
) -> None:
    assert await consumer.submit(b"nonsense") is None
    assert publisher.get_published() == []


@pytest.mark.asyncio
async def test_background_loop(
    consumer: InMemoryRequestConsumer, publisher: InMemoryResponsePublisher
) -> None:
    await consumer.start()
    for i in range(3):
        await consumer.put(make_request("getBanks", message_id=f"q-{i}"))
    await consumer.put(json.dumps(wire_request(messageId="q-3")))
    await consumer.join()
    await consumer.stop()
    assert [r.message_id for r in publisher.responses] == ["q-0", "q-1", "q-2", "q-3"]


@pytest.mark.asyncio
async def test_background_loop_survives_publish_failure(
    consumer: InMemoryRequestConsumer, publisher: InMemoryResponsePublisher
) -> None:
    publisher.fail_with = MessagingConnectionError("down")
    await consumer.start()
    await consumer.put(make_request("getBanks", message_id="f-1"))
    await consumer.join()
    publisher.fail_with = None
    await consumer.put(make_request("getBanks", message_id="f-2"))
    await consumer.join()
    await consumer.stop()
    assert publisher.response_for("f-1") is None
    assert publisher.response_for("f-2") is not None


def test_assert_published_reports_mismatch(
    publisher: InMemoryResponsePublisher,
) -> None:
    with pytest.raises(AssertionError, match="m-404"):
        publisher.assert_published("m-404")


@pytest.mark.asyncio
async def test_reply_to_and_clear(publisher: InMemoryResponsePublisher) -> None:
    reply = ObpResponse.success(None, CallContext.from_request(make_request()))
    await publisher.publish(reply, reply_to="reply.q")
    assert publisher.get_published()[0][0] == "reply.q"
    publisher.clear()
    assert publisher.get_published() == []
