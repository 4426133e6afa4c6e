"""Builds the adapter from settings and runs it until shutdown."""

from __future__ import annotations

import asyncio
import contextlib
import importlib
import logging
import signal
from typing import TYPE_CHECKING, Any

from .connectors import MockConnector, NotImplementedConnector
from .counters import InMemoryCounterStore, RedisCounterStore, create_redis_client
from .exceptions import ConfigurationError
from .health import ComponentHealthCheck, ConnectorHealthCheck, HealthRegistry
from .ports.connector import BackendConnector
from .routing import MessageRouter
from .telemetry import (
    CompositeTelemetry,
    InMemoryTelemetry,
    LoggingTelemetry,
    NoOpTelemetry,
)
from .transport.rabbitmq import (
    RabbitMQConnectionManager,
    RabbitMQRequestConsumer,
    RabbitMQResponsePublisher,
)

if TYPE_CHECKING:
    from .config import AdapterSettings
    from .ports.counter import CounterStore
    from .ports.observability import Telemetry

logger = logging.getLogger(__name__)

BUILTIN_CONNECTORS: dict[str, type[BackendConnector]] = {
    "mock": MockConnector,
    "not-implemented": NotImplementedConnector,
}


def load_connector(spec: str) -> BackendConnector:
    """Instantiate a connector from a built-in name or ``module:Class`` path.

    Raises:
        ConfigurationError: If the path cannot be imported, the class fails to
            construct, or the instance does not satisfy ``BackendConnector``.
    """
    builtin = BUILTIN_CONNECTORS.get(spec.strip().lower())
    if builtin is not None:
        return builtin()

    module_name, sep, attr = spec.partition(":")
    if not sep or not module_name or not attr:
        raise ConfigurationError(
            f"Connector {spec!r} is neither built-in "
            f"({', '.join(sorted(BUILTIN_CONNECTORS))}) nor a 'module:Class' path"
        )
    try:
        factory = getattr(importlib.import_module(module_name), attr)
    except (ImportError, AttributeError) as e:
        raise ConfigurationError(f"Cannot import connector {spec!r}: {e}") from e
    try:
        connector = factory()
    except Exception as e:
        raise ConfigurationError(f"Connector {spec!r} failed to construct: {e}") from e
    if not isinstance(connector, BackendConnector):
        raise ConfigurationError(
            f"{spec!r} does not implement the BackendConnector protocol"
        )
    return connector


def _build_sink(name: str) -> Telemetry:
    if name == "logging":
        return LoggingTelemetry()
    if name == "noop":
        return NoOpTelemetry()
    if name == "memory":
        return InMemoryTelemetry()
    if name == "opentelemetry":
        try:
            from .telemetry.tracing import OpenTelemetryTelemetry
        except ImportError as e:
            raise ConfigurationError(
                "Telemetry 'opentelemetry' requires the [opentelemetry] extra"
            ) from e
        return OpenTelemetryTelemetry()
    raise ConfigurationError(f"Unknown telemetry sink {name!r}")


def build_telemetry(names: list[str]) -> Telemetry:
    """One sink per name; several names fan out through ``CompositeTelemetry``."""
    if not names:
        raise ConfigurationError("At least one telemetry sink is required")
    sinks = [_build_sink(name) for name in names]
    if len(sinks) == 1:
        return sinks[0]
    return CompositeTelemetry(sinks)


class AdapterRuntime:
    """The wired adapter: router, RabbitMQ transport, counters and status app.

    Use :meth:`from_settings` to build it, then ``await run()``; or drive
    ``start()`` / ``stop()`` yourself when embedding.
    """

    def __init__(
        self,
        settings: AdapterSettings,
        *,
        connector: BackendConnector | None = None,
        telemetry: Telemetry | None = None,
        counter_store: CounterStore | None = None,
        redis_client: Any = None,
        connection: RabbitMQConnectionManager | None = None,
    ) -> None:
        self.settings = settings
        self.redis_client = redis_client
        self.router = MessageRouter(
            connector or load_connector(settings.connector),
            telemetry or build_telemetry(settings.telemetry_sinks),
            counter_store,
        )
        self.connection = connection or RabbitMQConnectionManager.from_settings(
            settings
        )
        self.publisher = RabbitMQResponsePublisher(
            self.connection, queue_name=settings.response_queue
        )
        self.consumer = RabbitMQRequestConsumer(
            self.connection,
            self.router,
            self.publisher,
            queue_name=settings.request_queue,
            max_concurrency=settings.max_concurrency,
            dispatch_timeout=settings.dispatch_timeout,
            shutdown_grace_period=settings.shutdown_grace_period,
        )
        self.health = HealthRegistry()
        self.health.register("rabbitmq", ComponentHealthCheck(self.consumer))
        self.health.register("connector", ConnectorHealthCheck(self.router.connector))
        if counter_store is not None:
            self.health.register("counters", ComponentHealthCheck(counter_store))

    @classmethod
    def from_settings(cls, settings: AdapterSettings) -> AdapterRuntime:
        """Build every component named by *settings*."""
        redis_client = None
        counter_store: CounterStore
        if settings.redis_enabled:
            redis_client = create_redis_client(
                settings.redis_host,
                settings.redis_port,
                db=settings.redis_db,
                password=settings.redis_password,
            )
            counter_store = RedisCounterStore(
                redis_client, service_name=settings.service_name
            )
        else:
            counter_store = InMemoryCounterStore()
        return cls(settings, counter_store=counter_store, redis_client=redis_client)

    def create_status_app(self) -> Any:
        from .status import create_status_app

        return create_status_app(self.health, self.router)

    async def start(self) -> None:
        """Connect to RabbitMQ and start consuming requests."""
        connector = self.router.connector
        logger.info(
            "Starting %s with connector %s: %s -> %s",
            self.settings.service_name,
            getattr(connector, "name", type(connector).__name__),
            self.settings.request_queue,
            self.settings.response_queue,
        )
        await self.consumer.start()
        self.health.mark_ready()

    async def stop(self) -> None:
        """Drain in-flight dispatches and release connections."""
        self.health.mark_ready(False)
        try:
            await self.consumer.stop()
        finally:
            await self.connection.close()
            if self.redis_client is not None:
                await self.redis_client.aclose()
        logger.info("%s stopped", self.settings.service_name)

    async def run(self) -> None:
        """Start, serve the status surface (or wait for a signal), then stop."""
        await self.start()
        try:
            if self.settings.status_enabled:
                import uvicorn

                server = uvicorn.Server(
                    uvicorn.Config(
                        self.create_status_app(),
                        host=self.settings.status_host,
                        port=self.settings.status_port,
                        log_level=self.settings.log_level.lower(),
                        log_config=None,
                    )
                )
                logger.info(
                    "Status surface on http://%s:%d",
                    self.settings.status_host,
                    self.settings.status_port,
                )
                await server.serve()
            else:
                await _wait_for_shutdown_signal()
        finally:
            await self.stop()


async def _wait_for_shutdown_signal() -> None:
    stop = asyncio.Event()
    loop = asyncio.get_running_loop()
    for sig in (signal.SIGINT, signal.SIGTERM):
        # Not available on Windows event loops
        with contextlib.suppress(NotImplementedError):
            loop.add_signal_handler(sig, stop.set)
    await stop.wait()
