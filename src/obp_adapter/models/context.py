"""Per-dispatch correlation and identity metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from .envelope import ObpRequest


@dataclass(frozen=True)
class CallContext:
    """Created once per request at the router boundary and never mutated.

    Threaded through the handler, the connector call and every telemetry call
    of one dispatch.
    """

    correlation_id: str
    action: str
    message_format: str | None = None
    user_id: str | None = None
    username: str | None = None
    bank_id: str | None = None
    account_id: str | None = None

    @classmethod
    def from_request(cls, request: ObpRequest) -> CallContext:
        return cls(
            correlation_id=request.message_id,
            action=request.action,
            message_format=request.message_format,
            user_id=request.user_id,
            username=request.username,
            bank_id=request.bank_id,
            account_id=request.account_id,
        )

    def log_fields(self) -> dict[str, Any]:
        """Non-empty fields, for structured log entries."""
        return {
            key: value
            for key, value in (
                ("correlation_id", self.correlation_id),
                ("action", self.action),
                ("user_id", self.user_id),
                ("bank_id", self.bank_id),
                ("account_id", self.account_id),
            )
            if value is not None
        }
