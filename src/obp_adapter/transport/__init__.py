"""Transport adapters: RabbitMQ and in-memory."""

from __future__ import annotations

from .memory import InMemoryRequestConsumer, InMemoryResponsePublisher

__all__ = [
    "InMemoryRequestConsumer",
    "InMemoryResponsePublisher",
]
