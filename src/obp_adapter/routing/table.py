"""DispatchTable — action name to handler mapping with completeness checks."""

from __future__ import annotations

import logging
from types import MappingProxyType
from typing import TYPE_CHECKING

from ..exceptions import DispatchTableError, HandlerRegistrationError
from ..models import Action

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable, Mapping

    from ..models import CallContext, ObpRequest, ObpResponse
    from ..ports.connector import BackendConnector
    from ..ports.observability import Telemetry

    Handler = Callable[
        [ObpRequest, CallContext, BackendConnector, Telemetry],
        Awaitable[ObpResponse],
    ]

logger = logging.getLogger(__name__)


class DispatchTable:
    """Single source of truth for which handler serves which action.

    Built once at startup. Registering a second handler for an action raises
    ``HandlerRegistrationError``; once ``freeze()`` is called the table can no
    longer change. ``validate()`` raises ``DispatchTableError`` when an action
    of ``required`` has no handler.
    """

    def __init__(self, required: Iterable[str] | None = None) -> None:
        self._handlers: dict[str, Handler] = {}
        self._required = frozenset(
            required if required is not None else (a.value for a in Action)
        )
        self._frozen: Mapping[str, Handler] | None = None

    # ── Registration ─────────────────────────────────────────────

    def register(self, action: Action | str, handler: Handler) -> None:
        name = action.value if isinstance(action, Action) else action
        if self._frozen is not None:
            raise HandlerRegistrationError(
                f"Dispatch table is frozen, cannot register {name}"
            )
        existing = self._handlers.get(name)
        if existing is not None and existing is not handler:
            msg = (
                f"Duplicate handler for action {name}: "
                f"{_name_of(existing)} already registered, "
                f"cannot register {_name_of(handler)}"
            )
            raise HandlerRegistrationError(msg)
        self._handlers[name] = handler
        logger.debug("Registered handler %s -> %s", name, _name_of(handler))

    def freeze(self) -> Mapping[str, Handler]:
        """Validate and make the table read-only. Returns the frozen mapping."""
        self.validate()
        if self._frozen is None:
            self._frozen = MappingProxyType(dict(self._handlers))
        return self._frozen

    # ── Lookup ───────────────────────────────────────────────────

    def get(self, action: str) -> Handler | None:
        table = self._frozen if self._frozen is not None else self._handlers
        return table.get(action)

    def __contains__(self, action: object) -> bool:
        return action in self._handlers

    def __len__(self) -> int:
        return len(self._handlers)

    def actions(self) -> list[str]:
        return sorted(self._handlers)

    @property
    def is_frozen(self) -> bool:
        return self._frozen is not None

    # ── Validation ───────────────────────────────────────────────

    def missing(self) -> list[str]:
        return sorted(self._required - self._handlers.keys())

    def validate(self) -> None:
        missing = self.missing()
        if missing:
            raise DispatchTableError(missing)


def _name_of(handler: Handler) -> str:
    return getattr(handler, "__name__", repr(handler))
