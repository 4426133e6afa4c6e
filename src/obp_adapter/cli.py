"""Command-line entry point: ``obp-adapter``."""

from __future__ import annotations

import asyncio
import json
from typing import Any, Optional

import typer
from pydantic import ValidationError

from . import __version__
from .config import AdapterSettings
from .exceptions import ConfigurationError, MessagingConnectionError
from .logging_setup import configure_logging
from .routing import build_dispatch_table

app = typer.Typer(
    name="obp-adapter",
    help="Routes OBP message-bus requests to a core-banking backend connector.",
    no_args_is_help=True,
    add_completion=False,
)

_SECRET_FIELDS = frozenset({"rabbitmq_password", "redis_password", "rabbitmq_url"})


def _load_settings(overrides: dict[str, Any]) -> AdapterSettings:
    try:
        return AdapterSettings(**{k: v for k, v in overrides.items() if v is not None})
    except ValidationError as e:
        typer.echo(f"Invalid configuration:\n{e}", err=True)
        raise typer.Exit(code=2) from e


@app.command(name="run", help="Consume requests and serve the status surface.")
def run_cmd(
    connector: Optional[str] = typer.Option(
        None, help="Built-in connector name or 'module:Class' import path."
    ),
    telemetry: Optional[str] = typer.Option(
        None, help="Comma-separated sinks: logging, noop, memory, opentelemetry."
    ),
    log_level: Optional[str] = typer.Option(None, help="Root log level."),
    status: Optional[bool] = typer.Option(
        None, "--status/--no-status", help="Serve the HTTP status surface."
    ),
) -> None:
    """Run the adapter until interrupted."""
    from .bootstrap import AdapterRuntime

    settings = _load_settings(
        {
            "connector": connector,
            "telemetry": telemetry,
            "log_level": log_level,
            "status_enabled": status,
        }
    )
    configure_logging(settings.log_level)
    try:
        runtime = AdapterRuntime.from_settings(settings)
        asyncio.run(runtime.run())
    except ConfigurationError as e:
        typer.echo(f"Configuration error: {e}", err=True)
        raise typer.Exit(code=2) from e
    except MessagingConnectionError as e:
        typer.echo(f"RabbitMQ unavailable: {e}", err=True)
        raise typer.Exit(code=1) from e
    except KeyboardInterrupt:
        pass


@app.command(name="config", help="Print the effective configuration.")
def config_cmd(
    show_secrets: bool = typer.Option(False, help="Include passwords and URLs."),
) -> None:
    settings = _load_settings({})
    data = settings.model_dump(mode="json")
    if not show_secrets:
        for key in _SECRET_FIELDS:
            if data.get(key):
                data[key] = "***"
    typer.echo(json.dumps(data, indent=2, sort_keys=True))


@app.command(name="actions", help="List the actions the dispatch table serves.")
def actions_cmd() -> None:
    table = build_dispatch_table()
    for action in table.actions():
        typer.echo(action)


@app.command(name="version", help="Print the adapter version.")
def version_cmd() -> None:
    typer.echo(__version__)
