"""RabbitMQRequestConsumer: consumes requests, dispatches them, acks after publish."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from ...ports.messaging import RequestConsumer
from ...serialization import EnvelopeSerializer

if TYPE_CHECKING:
    from aio_pika.abc import AbstractIncomingMessage, AbstractQueue

    from ...ports.messaging import ResponsePublisher
    from ...routing import MessageRouter
    from .connection import RabbitMQConnectionManager

logger = logging.getLogger(__name__)


class RabbitMQRequestConsumer(RequestConsumer):
    """Consumes the inbound request queue with manual acknowledgement.

    Per message: dispatch through the router (bounded by ``max_concurrency``
    and ``dispatch_timeout``), publish the response, then ack. A message is
    never acked before its response is published (at-least-once delivery):

    - publish failed -> nack with requeue, so it is redelivered;
    - dispatch timed out -> reject without requeue, nothing published;
    - malformed and uncorrelatable -> reject without requeue.

    A message whose id is already being dispatched is acked without a second
    dispatch, so one correlation id never yields two concurrent responses.
    """

    def __init__(
        self,
        connection: RabbitMQConnectionManager,
        router: MessageRouter,
        publisher: ResponsePublisher,
        *,
        queue_name: str = "obp.request",
        max_concurrency: int = 10,
        dispatch_timeout: float | None = 30.0,
        shutdown_grace_period: float = 10.0,
        serializer: EnvelopeSerializer | None = None,
    ) -> None:
        """Configure consumer.

        Args:
            connection: Shared connection manager.
            router: Router every decoded message is handed to.
            publisher: Publishes the router's responses.
            queue_name: Inbound queue, declared durable by the connection.
            max_concurrency: Upper bound on simultaneous dispatches.
            dispatch_timeout: Seconds before a dispatch is abandoned; None
                disables the timeout.
            shutdown_grace_period: Seconds ``stop()`` waits for in-flight
                dispatches before cancelling them.
            serializer: Used to read the messageId of a delivery before dispatch.
        """
        if max_concurrency < 1:
            raise ValueError("max_concurrency must be >= 1")
        self._connection = connection
        self._router = router
        self._publisher = publisher
        self._queue_name = queue_name
        self._semaphore = asyncio.Semaphore(max_concurrency)
        self._dispatch_timeout = dispatch_timeout
        self._grace = shutdown_grace_period
        self._serializer = serializer or EnvelopeSerializer()
        self._queue: AbstractQueue | None = None
        self._consumer_tag: str | None = None
        self._in_flight: set[str] = set()
        self._tasks: set[asyncio.Task[None]] = set()

    @property
    def queue_name(self) -> str:
        return self._queue_name

    @property
    def in_flight(self) -> frozenset[str]:
        return frozenset(self._in_flight)

    async def start(self) -> None:
        """Declare the request queue and start consuming."""
        self._queue = await self._connection.get_queue(self._queue_name)
        self._consumer_tag = await self._queue.consume(self._on_message)
        logger.info("Consuming requests from %s", self._queue_name)

    async def stop(self) -> None:
        """Stop consuming, give in-flight dispatches the grace period, then cancel."""
        if self._queue is not None and self._consumer_tag is not None:
            await self._queue.cancel(self._consumer_tag)
            self._consumer_tag = None
        pending = {t for t in self._tasks if not t.done()}
        if pending:
            logger.info("Waiting for %d in-flight dispatch(es)", len(pending))
            _, still_running = await asyncio.wait(pending, timeout=self._grace)
            for task in still_running:
                task.cancel("adapter shutdown")
            if still_running:
                await asyncio.gather(*still_running, return_exceptions=True)

    async def _on_message(self, raw: AbstractIncomingMessage) -> None:
        task = asyncio.create_task(self._guarded(raw))
        self._tasks.add(task)
        task.add_done_callback(self._on_task_done)

    async def _guarded(self, raw: AbstractIncomingMessage) -> None:
        async with self._semaphore:
            await self.handle_message(raw)

    def _on_task_done(self, task: asyncio.Task[None]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.error("Request handling task failed: %s", exc, exc_info=exc)

    async def handle_message(self, raw: AbstractIncomingMessage) -> None:
        """Dispatch one delivery and settle it (ack, nack or reject)."""
        message_id = (
            self._serializer.peek_message_id(raw.body)
            or raw.correlation_id
            or raw.message_id
        )
        if message_id is not None and message_id in self._in_flight:
            logger.warning("Message %s is already in flight, skipping", message_id)
            await raw.ack()
            return

        if message_id is not None:
            self._in_flight.add(message_id)
        try:
            try:
                response = await asyncio.wait_for(
                    self._router.process(raw.body, self._queue_name),
                    timeout=self._dispatch_timeout,
                )
            except asyncio.TimeoutError:
                logger.error(
                    "Dispatch of %s exceeded %ss, rejecting",
                    message_id,
                    self._dispatch_timeout,
                )
                await raw.reject(requeue=False)
                return

            if response is None:
                await raw.reject(requeue=False)
                return

            try:
                await self._publisher.publish(response, reply_to=raw.reply_to)
            except Exception:  # noqa: BLE001
                logger.exception(
                    "Could not publish response %s, requeueing request",
                    response.message_id,
                )
                await raw.nack(requeue=True)
                return
            await raw.ack()
        finally:
            if message_id is not None:
                self._in_flight.discard(message_id)

    async def health_check(self) -> bool:
        """Return True if the connection is healthy."""
        return await self._connection.health_check()
