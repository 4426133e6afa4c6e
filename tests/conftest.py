"""Pytest fixtures shared by the adapter tests."""

from __future__ import annotations

import sys
from datetime import datetime, timezone
from pathlib import Path
from typing import Any

import pytest

# Ensure the package is importable when running pytest from the repo root
# without ``pip install -e .``
_src = Path(__file__).resolve().parent.parent / "src"
if _src.is_dir() and str(_src) not in sys.path:
    sys.path.insert(0, str(_src))

from obp_adapter.connectors import MockConnector  # noqa: E402
from obp_adapter.counters import InMemoryCounterStore  # noqa: E402
from obp_adapter.models import CallContext, ObpRequest  # noqa: E402
from obp_adapter.routing import MessageRouter  # noqa: E402
from obp_adapter.telemetry import InMemoryTelemetry  # noqa: E402

_MISSING = object()


def make_request(
    action: str = "getBank",
    payload: Any = _MISSING,
    *,
    message_id: str = "msg-1",
    **envelope: Any,
) -> ObpRequest:
    """Build a valid request envelope; ``payload`` defaults to ``{}``."""
    return ObpRequest(
        message_id=message_id,
        timestamp=datetime(2025, 1, 15, 10, 30, tzinfo=timezone.utc),
        message_format="obp.v1",
        action=action,
        payload={} if payload is _MISSING else payload,
        **envelope,
    )


def wire_request(**overrides: Any) -> dict[str, Any]:
    """A request as it appears on the wire (camelCase JSON object)."""
    data: dict[str, Any] = {
        "messageId": "msg-1",
        "timestamp": "2025-01-15T10:30:00Z",
        "messageFormat": "obp.v1",
        "action": "getBank",
        "payload": {"bankId": "gh.29.uk"},
    }
    data.update(overrides)
    return data


@pytest.fixture
def context() -> CallContext:
    return CallContext(correlation_id="msg-1", action="getBank")


@pytest.fixture
def connector() -> MockConnector:
    return MockConnector()


@pytest.fixture
def telemetry() -> InMemoryTelemetry:
    return InMemoryTelemetry()


@pytest.fixture
def counters() -> InMemoryCounterStore:
    return InMemoryCounterStore()


@pytest.fixture
def router(
    connector: MockConnector,
    telemetry: InMemoryTelemetry,
    counters: InMemoryCounterStore,
) -> MessageRouter:
    return MessageRouter(connector, telemetry, counters)
