"""Tests for the HTTP status surface."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock

import pytest
from fastapi.testclient import TestClient

from conftest import make_request
from obp_adapter.connectors import MockConnector
from obp_adapter.counters import InMemoryCounterStore
from obp_adapter.exceptions import CounterStoreError
from obp_adapter.health import HealthRegistry
from obp_adapter.models import Failure
from obp_adapter.routing import MessageRouter
from obp_adapter.status import create_status_app


@pytest.fixture
def registry() -> HealthRegistry:
    registry = HealthRegistry()
    registry.register("rabbitmq", lambda: True)
    return registry


def test_health_ok(registry: HealthRegistry, router: MessageRouter) -> None:
    client = TestClient(create_status_app(registry, router))
    response = client.get("/health")
    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "healthy"
    assert body["components"] == {"rabbitmq": "up"}


def test_health_down(router: MessageRouter) -> None:
    registry = HealthRegistry()
    registry.register("rabbitmq", lambda: False)
    response = TestClient(create_status_app(registry, router)).get("/health")
    assert response.status_code == 503
    assert response.json()["status"] == "unhealthy"


def test_ready_requires_started_runtime(
    registry: HealthRegistry, router: MessageRouter
) -> None:
    client = TestClient(create_status_app(registry, router))
    assert client.get("/ready").status_code == 503
    registry.mark_ready()
    response = client.get("/ready")
    assert response.status_code == 200
    assert response.json()["ready"] is True


@pytest.mark.asyncio
async def test_stats_reports_counters(
    registry: HealthRegistry, router: MessageRouter
) -> None:
    await router.dispatch(make_request("getBank", {"bankId": "gh.29.uk"}))
    await router.dispatch(make_request("getBanks"))
    response = TestClient(create_status_app(registry, router)).get("/stats")
    assert response.status_code == 200
    assert response.json() == {
        "enabled": True,
        "counts": {
            "getBank": {"outbound": 1, "inbound": 1},
            "getBanks": {"outbound": 1, "inbound": 1},
        },
    }


def test_stats_without_store(registry: HealthRegistry) -> None:
    router = MessageRouter(MockConnector())
    response = TestClient(create_status_app(registry, router)).get("/stats")
    assert response.json() == {"enabled": False, "counts": {}}


def test_stats_store_unavailable(registry: HealthRegistry) -> None:
    store = MagicMock(spec=InMemoryCounterStore)
    store.get_all_counts = AsyncMock(side_effect=CounterStoreError("redis down"))
    router = MessageRouter(MockConnector(), counter_store=store)
    response = TestClient(create_status_app(registry, router)).get("/stats")
    assert response.status_code == 503
    assert "redis down" in response.json()["error"]


def test_info(registry: HealthRegistry, router: MessageRouter) -> None:
    response = TestClient(create_status_app(registry, router)).get("/info")
    assert response.status_code == 200
    body = response.json()
    assert body["name"] == "obp-adapter"
    assert body["connector"] == "mock"
    assert "makePayment" in body["supportedActions"]


def test_info_failure(registry: HealthRegistry) -> None:
    class NoInfo(MockConnector):
        async def get_adapter_info(self, context: Any) -> Any:
            return Failure("NOT_IMPLEMENTED", "no info", context)

    router = MessageRouter(NoInfo())
    response = TestClient(create_status_app(registry, router)).get("/info")
    assert response.status_code == 503
    assert response.json()["errorCode"] == "NOT_IMPLEMENTED"
