"""Telemetry sinks. ``OpenTelemetryTelemetry`` lives in ``.tracing`` (optional)."""

from __future__ import annotations

from .composite import CompositeTelemetry
from .isolated import IsolatedTelemetry
from .memory import InMemoryTelemetry, TelemetryCall
from .noop import NoOpTelemetry
from .structured import LoggingTelemetry

__all__ = [
    "CompositeTelemetry",
    "InMemoryTelemetry",
    "IsolatedTelemetry",
    "LoggingTelemetry",
    "NoOpTelemetry",
    "TelemetryCall",
]
