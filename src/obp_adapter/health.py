"""Health checks and the registry that aggregates them for the status surface."""

from __future__ import annotations

import asyncio
import datetime
import inspect
import logging
from typing import TYPE_CHECKING, Any

from .correlation import generate_correlation_id
from .models import CallContext

if TYPE_CHECKING:
    from collections.abc import Callable

    from .ports.connector import BackendConnector

logger = logging.getLogger(__name__)


class ComponentHealthCheck:
    """Health check for anything exposing ``health_check()`` or ``is_connected()``.

    Covers the RabbitMQ consumer and publisher and both counter stores.
    """

    def __init__(self, component: Any) -> None:
        self._component = component

    async def __call__(self) -> bool:
        try:
            for attr in ("health_check", "is_connected"):
                probe = getattr(self._component, attr, None)
                if callable(probe):
                    result = probe()
                    if inspect.isawaitable(result):
                        result = await result
                    return bool(result)
            return False
        except Exception as e:  # noqa: BLE001
            logger.debug("Health probe failed: %s", e)
            return False


class ConnectorHealthCheck:
    """Health check delegating to ``BackendConnector.check_health``."""

    def __init__(self, connector: BackendConnector) -> None:
        self._connector = connector

    async def __call__(self) -> bool:
        context = CallContext(
            correlation_id=f"health-{generate_correlation_id()}",
            action="checkHealth",
        )
        try:
            result = await self._connector.check_health(context)
        except Exception as e:  # noqa: BLE001
            logger.debug("Connector health probe failed: %s", e)
            return False
        if not result.is_success:
            return False
        status = getattr(result.data, "status", None)
        return status is None or str(status).lower() in {"up", "ok", "healthy"}


class HealthRegistry:
    """Registry of named health checks; a check is any callable returning bool."""

    def __init__(self) -> None:
        self._checks: dict[str, Callable[[], Any]] = {}
        self._ready = False

    def register(self, name: str, check: Callable[[], Any]) -> None:
        """Register a health check."""
        self._checks[name] = check

    def unregister(self, name: str) -> None:
        self._checks.pop(name, None)

    @property
    def names(self) -> list[str]:
        return list(self._checks)

    def mark_ready(self, ready: bool = True) -> None:
        """Flag set by the runtime once consuming has started."""
        self._ready = ready

    @property
    def is_ready(self) -> bool:
        return self._ready

    async def check_all(self) -> dict[str, str]:
        """Run all checks and return status map."""
        result: dict[str, str] = {}
        for name, check in self._checks.items():
            try:
                value = check()
                if asyncio.iscoroutine(value):
                    value = await value
                result[name] = "up" if value else "down"
            except Exception:  # noqa: BLE001
                logger.warning("Health check %s raised", name, exc_info=True)
                result[name] = "down"
        return result

    async def status(self) -> dict[str, Any]:
        """Return full health status report."""
        components = await self.check_all()
        healthy = all(v == "up" for v in components.values())
        return {
            "status": "healthy" if healthy else "unhealthy",
            "ready": self._ready,
            "components": components,
            "timestamp": datetime.datetime.now(datetime.timezone.utc).isoformat(),
        }
