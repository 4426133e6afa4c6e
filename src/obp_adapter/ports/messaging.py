from __future__ import annotations

from typing import TYPE_CHECKING, Any, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..models import ObpResponse


@runtime_checkable
class ResponsePublisher(Protocol):
    """
    Port for publishing response envelopes to the outbound queue.

    Transport packages provide concrete adapters.
    """

    async def publish(
        self,
        response: ObpResponse,
        *,
        reply_to: str | None = None,
        **kwargs: Any,
    ) -> None:
        """
        Publish *response* to the configured response queue.

        Args:
            response: Response envelope; its ``message_id`` is the correlation id.
            reply_to: Queue named by the request's ``reply_to`` property,
                overriding the configured response queue.
            **kwargs: Transport-specific metadata (headers, ...).
        """
        ...


@runtime_checkable
class RequestConsumer(Protocol):
    """
    Port for consuming request envelopes from the inbound queue.

    Transport packages provide concrete adapters.
    """

    async def start(self) -> None:
        """Start consuming; each message is handed to the router."""
        ...

    async def stop(self) -> None:
        """Stop consuming and wait for in-flight dispatches to settle."""
        ...
