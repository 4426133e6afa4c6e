"""BackendResult — the uniform shape every connector operation returns."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, ClassVar, Generic, TypeVar, Union

if TYPE_CHECKING:
    from .context import CallContext

T = TypeVar("T")

NOT_IMPLEMENTED = "NOT_IMPLEMENTED"


@dataclass(frozen=True)
class Success(Generic[T]):
    """Connector call succeeded with ``data`` (the operation's domain payload)."""

    data: T
    context: CallContext | None = None

    is_success: ClassVar[bool] = True


@dataclass(frozen=True)
class Failure:
    """Connector reported a domain error.

    ``code`` is backend-defined (e.g. ``BANK_NOT_FOUND``) and copied verbatim
    into the response; the router never interprets it.
    """

    code: str
    message: str
    context: CallContext | None = None

    is_success: ClassVar[bool] = False


BackendResult = Union[Success[T], Failure]


def not_implemented(operation: str, context: CallContext | None = None) -> Failure:
    """Standard result for an operation a connector does not support."""
    return Failure(
        code=NOT_IMPLEMENTED,
        message=f"{operation} is not implemented by this connector",
        context=context,
    )
