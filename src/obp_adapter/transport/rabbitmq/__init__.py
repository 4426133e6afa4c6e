"""RabbitMQ transport adapter (aio-pika)."""

from __future__ import annotations

from .connection import RabbitMQConnectionManager
from .consumer import RabbitMQRequestConsumer
from .publisher import RabbitMQResponsePublisher

__all__ = [
    "RabbitMQConnectionManager",
    "RabbitMQRequestConsumer",
    "RabbitMQResponsePublisher",
]
