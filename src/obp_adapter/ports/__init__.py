"""Capability ports: backend connector, telemetry, counter store, messaging."""

from __future__ import annotations

from .connector import BackendConnector
from .counter import CounterStore
from .messaging import RequestConsumer, ResponsePublisher
from .observability import Telemetry

__all__ = [
    "BackendConnector",
    "CounterStore",
    "RequestConsumer",
    "ResponsePublisher",
    "Telemetry",
]
