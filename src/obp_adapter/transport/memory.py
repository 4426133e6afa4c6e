"""In-memory transport with assertion helpers for tests and local runs."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING, Any

from ..models import ObpRequest, ObpResponse
from ..ports.messaging import RequestConsumer, ResponsePublisher
from ..serialization import EnvelopeSerializer

if TYPE_CHECKING:
    from ..routing import MessageRouter

logger = logging.getLogger(__name__)


class InMemoryResponsePublisher(ResponsePublisher):
    """Buffers published responses instead of sending them anywhere.

    ``get_published()`` and ``assert_published()`` support test assertions.
    Set ``fail_with`` to make every publish raise that exception.
    """

    def __init__(self, queue_name: str = "obp.response") -> None:
        self._queue_name = queue_name
        self._published: list[tuple[str, ObpResponse, dict[str, Any]]] = []
        self.fail_with: Exception | None = None

    async def publish(
        self,
        response: ObpResponse,
        *,
        reply_to: str | None = None,
        **kwargs: Any,
    ) -> None:
        if self.fail_with is not None:
            raise self.fail_with
        self._published.append((reply_to or self._queue_name, response, kwargs))

    def get_published(self) -> list[tuple[str, ObpResponse, dict[str, Any]]]:
        """Return all (queue, response, kwargs) published so far."""
        return list(self._published)

    @property
    def responses(self) -> list[ObpResponse]:
        return [r for _, r, _ in self._published]

    def response_for(self, message_id: str) -> ObpResponse | None:
        """Return the last response correlated to *message_id*, if any."""
        for _, response, _ in reversed(self._published):
            if response.message_id == message_id:
                return response
        return None

    def assert_published(
        self,
        message_id: str,
        count: int = 1,
        queue: str | None = None,
    ) -> None:
        """Assert that exactly `count` responses carry this message id.

        Optionally restrict to a specific queue. Raises AssertionError if not met.
        """
        published = self._published
        if queue is not None:
            published = [(q, r, k) for q, r, k in published if q == queue]
        matching = [r for _, r, _ in published if r.message_id == message_id]
        assert len(matching) == count, (
            f"Expected {count} response(s) for messageId={message_id!r}, "
            f"got {len(matching)}. Published: "
            f"{[r.message_id for _, r, _ in published]}"
        )

    def clear(self) -> None:
        self._published.clear()


class InMemoryRequestConsumer(RequestConsumer):
    """Feeds requests straight into a router and publishes the responses.

    ``submit()`` processes one message and returns its response; ``start()``
    drains an internal queue in the background so ``put()`` behaves like a
    broker delivery.
    """

    def __init__(
        self,
        router: MessageRouter,
        publisher: ResponsePublisher,
        *,
        queue_name: str = "obp.request",
        serializer: EnvelopeSerializer | None = None,
    ) -> None:
        self._router = router
        self._publisher = publisher
        self._queue_name = queue_name
        self._serializer = serializer or EnvelopeSerializer()
        self._inbox: asyncio.Queue[bytes] = asyncio.Queue()
        self._task: asyncio.Task[None] | None = None

    @property
    def queue_name(self) -> str:
        return self._queue_name

    async def submit(self, message: ObpRequest | bytes | str) -> ObpResponse | None:
        """Process one request and publish its response (if any)."""
        raw = (
            self._serializer.encode_request(message)
            if isinstance(message, ObpRequest)
            else message
        )
        response = await self._router.process(raw, self._queue_name)
        if response is not None:
            await self._publisher.publish(response)
        return response

    async def put(self, message: ObpRequest | bytes | str) -> None:
        """Enqueue a request for the background loop started by ``start()``."""
        if isinstance(message, ObpRequest):
            message = self._serializer.encode_request(message)
        elif isinstance(message, str):
            message = message.encode(self._serializer.encoding)
        await self._inbox.put(message)

    async def join(self) -> None:
        """Wait until every enqueued request has been processed."""
        await self._inbox.join()

    async def start(self) -> None:
        if self._task is None:
            self._task = asyncio.create_task(self._run())

    async def stop(self) -> None:
        if self._task is None:
            return
        self._task.cancel()
        try:
            await self._task
        except asyncio.CancelledError:
            pass
        self._task = None

    async def _run(self) -> None:
        while True:
            raw = await self._inbox.get()
            try:
                await self.submit(raw)
            except Exception:  # noqa: BLE001
                logger.exception("In-memory request processing failed")
            finally:
                self._inbox.task_done()
