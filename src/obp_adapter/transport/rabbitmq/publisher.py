"""RabbitMQResponsePublisher: publishes correlated responses to the outbound queue."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

import aio_pika

from ...exceptions import MessagingConnectionError
from ...ports.messaging import ResponsePublisher
from ...serialization import EnvelopeSerializer

if TYPE_CHECKING:
    from ...models import ObpResponse
    from .connection import RabbitMQConnectionManager


class RabbitMQResponsePublisher(ResponsePublisher):
    """Publishes through the default exchange straight to the response queue.

    The AMQP ``correlation_id`` and ``message_id`` properties both carry the
    response's ``messageId`` so consumers can correlate without parsing JSON.
    """

    def __init__(
        self,
        connection: RabbitMQConnectionManager,
        *,
        queue_name: str = "obp.response",
        serializer: EnvelopeSerializer | None = None,
        persistent: bool = True,
    ) -> None:
        """Configure publisher.

        Args:
            connection: Shared connection manager.
            queue_name: Outbound queue, declared durable by the connection.
            serializer: Used to encode responses; default EnvelopeSerializer().
            persistent: Publish with delivery mode 2 when True.
        """
        self._connection = connection
        self._queue_name = queue_name
        self._serializer = serializer or EnvelopeSerializer()
        self._persistent = persistent

    @property
    def queue_name(self) -> str:
        return self._queue_name

    async def publish(
        self,
        response: ObpResponse,
        *,
        reply_to: str | None = None,
        **kwargs: Any,
    ) -> None:
        """Publish *response* to ``reply_to`` or the configured response queue."""
        body = self._serializer.encode_response(response)
        await self._connection.connect()
        routing_key = reply_to or self._queue_name
        try:
            if routing_key == self._queue_name:
                await self._connection.get_queue(self._queue_name)
            await self._connection.channel.default_exchange.publish(
                aio_pika.Message(
                    body=body,
                    content_type="application/json",
                    correlation_id=response.message_id,
                    message_id=response.message_id,
                    timestamp=response.timestamp,
                    delivery_mode=(
                        aio_pika.DeliveryMode.PERSISTENT
                        if self._persistent
                        else aio_pika.DeliveryMode.NOT_PERSISTENT
                    ),
                    headers={
                        "status": response.status.value,
                        **(kwargs.get("headers") or {}),
                    },
                ),
                routing_key=routing_key,
            )
        except Exception as e:
            raise MessagingConnectionError(
                f"Publishing response {response.message_id} failed: {e}"
            ) from e

    async def health_check(self) -> bool:
        """Return True if the connection is healthy."""
        return await self._connection.health_check()
