"""Message routing: dispatch table, per-action handlers and the router."""

from __future__ import annotations

from .handlers import (
    DEFAULT_HANDLERS,
    INVALID_PAYLOAD,
    InvalidPayloadError,
    build_dispatch_table,
    parse_arguments,
    to_response,
)
from .router import CBS_ERROR, MALFORMED_ENVELOPE, UNKNOWN_ACTION, MessageRouter
from .table import DispatchTable

__all__ = [
    "CBS_ERROR",
    "DEFAULT_HANDLERS",
    "INVALID_PAYLOAD",
    "MALFORMED_ENVELOPE",
    "UNKNOWN_ACTION",
    "DispatchTable",
    "InvalidPayloadError",
    "MessageRouter",
    "build_dispatch_table",
    "parse_arguments",
    "to_response",
]
