"""Request/response envelopes exchanged with the OBP message bus."""

from __future__ import annotations

from datetime import datetime, timezone
from enum import Enum
from typing import TYPE_CHECKING, Any

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from pydantic_core import to_jsonable_python

if TYPE_CHECKING:
    from .context import CallContext


class WireModel(BaseModel):
    """Immutable model with camelCase names on the wire, snake_case in Python."""

    model_config = ConfigDict(
        frozen=True,
        populate_by_name=True,
        alias_generator=to_camel,
    )

    def to_wire(self) -> dict[str, Any]:
        """Dump to a JSON-compatible dict using wire names, omitting unset optionals."""
        return self.model_dump(mode="json", by_alias=True, exclude_none=True)


class Action(str, Enum):
    """Closed set of banking operations a request may ask for."""

    GET_BANK = "getBank"
    GET_BANKS = "getBanks"
    GET_BANK_ACCOUNT = "getBankAccount"
    GET_BANK_ACCOUNTS = "getBankAccounts"
    GET_ACCOUNT_BALANCE = "getAccountBalance"
    GET_TRANSACTION = "getTransaction"
    GET_TRANSACTIONS = "getTransactions"
    GET_CUSTOMER = "getCustomer"
    MAKE_PAYMENT = "makePayment"
    CREATE_BANK_ACCOUNT = "createBankAccount"
    UPDATE_BANK_ACCOUNT = "updateBankAccount"
    CREATE_CUSTOMER = "createCustomer"
    UPDATE_CUSTOMER = "updateCustomer"
    GET_CARD = "getCard"
    GET_COUNTERPARTY = "getCounterparty"
    CHECK_HEALTH = "checkHealth"
    GET_ADAPTER_INFO = "getAdapterInfo"

    @classmethod
    def parse(cls, value: str) -> Action | None:
        """Return the matching action, or None when the name is not supported."""
        try:
            return cls(value)
        except ValueError:
            return None


class ResponseStatus(str, Enum):
    SUCCESS = "success"
    ERROR = "error"


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ObpRequest(WireModel):
    """Request message from OBP-API to the adapter.

    ``payload`` is opaque here; only the handler for ``action`` validates it.
    ``bank_id``/``account_id`` are routing hints and are not checked.
    """

    model_config = ConfigDict(extra="ignore")

    message_id: str = Field(..., min_length=1)
    timestamp: datetime
    message_format: str
    action: str = Field(..., min_length=1)
    user_id: str | None = None
    username: str | None = None
    bank_id: str | None = None
    account_id: str | None = None
    payload: Any = Field(...)


class ObpResponse(WireModel):
    """Response message from the adapter back to OBP-API.

    ``message_id`` always carries the correlation id of the triggering request.
    """

    message_id: str
    timestamp: datetime = Field(default_factory=_utcnow)
    status: ResponseStatus
    error_code: str | None = None
    error_message: str | None = None
    data: Any = None
    meta: dict[str, Any] | None = None

    @property
    def is_success(self) -> bool:
        return self.status is ResponseStatus.SUCCESS

    @classmethod
    def success(
        cls,
        data: Any,
        context: CallContext,
        extra_meta: dict[str, Any] | None = None,
    ) -> ObpResponse:
        """Build a success response correlated to ``context``."""
        return cls(
            message_id=context.correlation_id,
            timestamp=_utcnow(),
            status=ResponseStatus.SUCCESS,
            data=_jsonable(data),
            meta=dict(extra_meta) if extra_meta else None,
        )

    @classmethod
    def error(
        cls,
        code: str,
        message: str,
        context: CallContext,
        extra_meta: dict[str, Any] | None = None,
    ) -> ObpResponse:
        """Build an error response correlated to ``context``."""
        return cls(
            message_id=context.correlation_id,
            timestamp=_utcnow(),
            status=ResponseStatus.ERROR,
            error_code=code,
            error_message=message,
            meta=dict(extra_meta) if extra_meta else None,
        )


def _jsonable(data: Any) -> Any:
    """Convert domain models (and containers of them) to plain JSON values."""
    if data is None:
        return None
    return to_jsonable_python(data, by_alias=True, exclude_none=True)
