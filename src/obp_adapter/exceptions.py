"""Exception hierarchy for obp-adapter."""

from __future__ import annotations


class ObpAdapterError(Exception):
    """Root exception for the entire adapter."""


class MalformedEnvelopeError(ObpAdapterError):
    """Raised when wire bytes cannot be decoded into a request envelope.

    ``message_id`` is set when the correlation id could still be recovered
    from the raw message.
    """

    def __init__(self, message: str, message_id: str | None = None) -> None:
        self.message_id = message_id
        super().__init__(message)


class ConfigurationError(ObpAdapterError):
    """Raised at startup when a component cannot be constructed from settings."""


class HandlerError(ObpAdapterError):
    """Base class for dispatch-table errors (registration, completeness)."""


class HandlerRegistrationError(HandlerError):
    """Raised when a second handler is registered for the same action."""


class DispatchTableError(HandlerError):
    """Raised when the dispatch table does not cover every declared action.

    Startup must halt on this error rather than run a partially wired router.
    """

    def __init__(self, missing: list[str]) -> None:
        self.missing = missing
        super().__init__(
            f"Dispatch table is missing handlers for: {', '.join(sorted(missing))}"
        )


class InfrastructureError(ObpAdapterError):
    """Base class for all infrastructure-related errors."""


class MessagingError(InfrastructureError):
    """Base class for all messaging-related infrastructure errors."""


class MessagingConnectionError(MessagingError):
    """Raised when connectivity to the message broker fails."""


class MessagingSerializationError(MessagingError):
    """Raised when a response envelope cannot be serialized."""


class CounterStoreError(InfrastructureError):
    """Raised when the counter store is unreachable or returns garbage."""


class TelemetryError(InfrastructureError):
    """Raised by telemetry code; callers should catch and log, never fail."""
