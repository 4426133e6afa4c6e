"""Adapter configuration, read from the environment and ``.env`` via pydantic-settings.

Every setting can be overridden with an ``OBP_ADAPTER_*`` environment variable
or a ``.env`` file in the working directory::

    export OBP_ADAPTER_RABBITMQ_HOST=rabbit.internal
    export OBP_ADAPTER_CONNECTOR=my_bank.connector:CoreBankingConnector
    export OBP_ADAPTER_TELEMETRY=logging,opentelemetry
"""

from __future__ import annotations

from urllib.parse import quote

from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

TELEMETRY_SINKS = frozenset({"logging", "noop", "memory", "opentelemetry"})
LOG_LEVELS = frozenset({"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG"})


class AdapterSettings(BaseSettings):
    """Runtime settings for the adapter process."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_prefix="OBP_ADAPTER_",
        env_file_encoding="utf-8",
        extra="ignore",
    )

    service_name: str = "obp-rabbit-cats-adapter"
    log_level: str = "INFO"

    # RabbitMQ; rabbitmq_url wins over the individual parts when set
    rabbitmq_url: str | None = None
    rabbitmq_host: str = "localhost"
    rabbitmq_port: int = Field(default=5672, ge=1, le=65535)
    rabbitmq_user: str = "guest"
    rabbitmq_password: str = "guest"
    rabbitmq_vhost: str = "/"
    request_queue: str = "obp.request"
    response_queue: str = "obp.response"
    prefetch_count: int = Field(default=10, ge=1)
    max_concurrency: int = Field(default=10, ge=1)
    dispatch_timeout: float | None = Field(default=30.0, gt=0)
    shutdown_grace_period: float = Field(default=10.0, ge=0)

    # Redis counters; in-memory counters when disabled
    redis_enabled: bool = False
    redis_host: str = "localhost"
    redis_port: int = Field(default=6379, ge=1, le=65535)
    redis_db: int = Field(default=0, ge=0)
    redis_password: str | None = None

    # Backend connector: "mock", "not-implemented" or an import path "module:Class"
    connector: str = "mock"
    # Comma-separated telemetry sinks, fanned out when more than one
    telemetry: str = "logging"

    # HTTP status surface
    status_enabled: bool = True
    status_host: str = "0.0.0.0"
    status_port: int = Field(default=8099, ge=1, le=65535)

    @field_validator("log_level")
    @classmethod
    def _check_log_level(cls, value: str) -> str:
        level = value.upper()
        if level not in LOG_LEVELS:
            raise ValueError(f"log_level must be one of {sorted(LOG_LEVELS)}")
        return level

    @field_validator("telemetry")
    @classmethod
    def _check_telemetry(cls, value: str) -> str:
        names = [n.strip().lower() for n in value.split(",") if n.strip()]
        if not names:
            raise ValueError("at least one telemetry sink is required")
        unknown = set(names) - TELEMETRY_SINKS
        if unknown:
            raise ValueError(
                f"unknown telemetry sink(s) {sorted(unknown)}; "
                f"expected {sorted(TELEMETRY_SINKS)}"
            )
        return ",".join(names)

    @property
    def telemetry_sinks(self) -> list[str]:
        return self.telemetry.split(",")

    @property
    def amqp_url(self) -> str:
        """Connection URL built from the individual RabbitMQ settings."""
        if self.rabbitmq_url:
            return self.rabbitmq_url
        vhost = quote(self.rabbitmq_vhost, safe="")
        return (
            f"amqp://{quote(self.rabbitmq_user, safe='')}:"
            f"{quote(self.rabbitmq_password, safe='')}@"
            f"{self.rabbitmq_host}:{self.rabbitmq_port}/{vhost}"
        )
