"""Minimal HTTP status surface: health, readiness, counters and adapter info."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from fastapi import FastAPI
from fastapi.responses import JSONResponse

from . import __version__
from .correlation import generate_correlation_id
from .exceptions import CounterStoreError
from .models import CallContext

if TYPE_CHECKING:
    from .health import HealthRegistry
    from .routing import MessageRouter


def create_status_app(registry: HealthRegistry, router: MessageRouter) -> FastAPI:
    """Build the status application.

    Routes:
        ``GET /health``: component status; 503 when any component is down.
        ``GET /ready``: 200 once the consumer runs and every component is up.
        ``GET /stats``: outbound/inbound counters per action.
        ``GET /info``: adapter info reported by the connector.
    """
    app = FastAPI(title="OBP adapter status", version=__version__)

    @app.get("/health")
    async def health() -> JSONResponse:
        report = await registry.status()
        code = 200 if report["status"] == "healthy" else 503
        return JSONResponse(report, status_code=code)

    @app.get("/ready")
    async def ready() -> JSONResponse:
        components = await registry.check_all()
        is_ready = registry.is_ready and all(v == "up" for v in components.values())
        return JSONResponse(
            {"ready": is_ready, "components": components},
            status_code=200 if is_ready else 503,
        )

    @app.get("/stats")
    async def stats() -> JSONResponse:
        store = router.counter_store
        if store is None:
            return JSONResponse({"enabled": False, "counts": {}})
        try:
            counts = await store.get_all_counts()
        except CounterStoreError as e:
            return JSONResponse(
                {"enabled": True, "error": str(e)}, status_code=503
            )
        body: dict[str, Any] = {
            action: {"outbound": outbound, "inbound": inbound}
            for action, (outbound, inbound) in sorted(counts.items())
        }
        return JSONResponse({"enabled": True, "counts": body})

    @app.get("/info")
    async def info() -> JSONResponse:
        context = CallContext(
            correlation_id=f"status-{generate_correlation_id()}",
            action="getAdapterInfo",
        )
        result = await router.connector.get_adapter_info(context)
        if not result.is_success:
            return JSONResponse(
                {"errorCode": result.code, "errorMessage": result.message},
                status_code=503,
            )
        data = result.data
        to_wire = getattr(data, "to_wire", None)
        return JSONResponse(to_wire() if callable(to_wire) else data)

    return app
