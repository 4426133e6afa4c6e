"""Per-action handlers and the default dispatch table.

A handler validates the action's payload, calls the matching connector
method and maps the ``BackendResult`` to a response. It never catches what
the connector raises; the router owns that conversion.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any, TypeVar

from pydantic import ValidationError

from ..models import (
    AccountArguments,
    Action,
    ActionArguments,
    BankAccountsArguments,
    BankAccountUpdate,
    BankArguments,
    CardArguments,
    CounterpartyArguments,
    CustomerArguments,
    CustomerUpdate,
    Failure,
    NewBankAccount,
    NewCustomer,
    ObpResponse,
    PaymentRequest,
    Success,
    TransactionArguments,
    TransactionQuery,
)
from ..serialization import describe_validation_error
from .table import DispatchTable

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from ..models import BackendResult, CallContext, ObpRequest
    from ..ports.connector import BackendConnector
    from ..ports.observability import Telemetry
    from .table import Handler

logger = logging.getLogger(__name__)

INVALID_PAYLOAD = "INVALID_PAYLOAD"

A = TypeVar("A", bound=ActionArguments)


class InvalidPayloadError(ValueError):
    """The request payload does not match the action's arguments."""


def parse_arguments(
    request: ObpRequest,
    model: type[A],
    fallbacks: dict[str, str | None] | None = None,
) -> A:
    """Validate ``request.payload`` against ``model``.

    Envelope-level ``bankId``/``accountId`` (plus any extra ``fallbacks``,
    keyed by wire name) fill in fields the payload leaves out; values in the
    payload always win.
    """
    payload = request.payload
    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise InvalidPayloadError(
            f"payload must be a JSON object, got {type(payload).__name__}"
        )
    defaults = {"bankId": request.bank_id, "accountId": request.account_id}
    defaults.update(fallbacks or {})
    data = {k: v for k, v in defaults.items() if v is not None}
    # Payload keys may use either the wire name or the Python field name
    aliases = {name: info.alias or name for name, info in model.model_fields.items()}
    data.update({aliases.get(k, k): v for k, v in payload.items()})
    try:
        return model.model_validate(data)
    except ValidationError as e:
        raise InvalidPayloadError(describe_validation_error(e)) from e


def to_response(result: BackendResult[Any], context: CallContext) -> ObpResponse:
    """Map a connector result to a response envelope.

    Anything other than ``Success``/``Failure`` breaks the connector contract
    and raises ``TypeError``.
    """
    if isinstance(result, Success):
        return ObpResponse.success(result.data, context)
    if isinstance(result, Failure):
        logger.info(
            "Connector returned %s for %s: %s",
            result.code,
            context.action,
            result.message,
        )
        return ObpResponse.error(result.code, result.message, context)
    raise TypeError(
        f"Connector returned {type(result).__name__}, expected Success or Failure"
    )


def _with_arguments(
    model: type[A],
    call: Callable[[BackendConnector, A, CallContext], Awaitable[BackendResult[Any]]],
    name: str,
) -> Handler:
    async def handle(
        request: ObpRequest,
        context: CallContext,
        connector: BackendConnector,
        telemetry: Telemetry,
    ) -> ObpResponse:
        try:
            args = parse_arguments(request, model)
        except InvalidPayloadError as e:
            return ObpResponse.error(INVALID_PAYLOAD, str(e), context)
        return to_response(await call(connector, args, context), context)

    handle.__name__ = handle.__qualname__ = name
    return handle


def _without_arguments(
    call: Callable[[BackendConnector, CallContext], Awaitable[BackendResult[Any]]],
    name: str,
) -> Handler:
    async def handle(
        request: ObpRequest,
        context: CallContext,
        connector: BackendConnector,
        telemetry: Telemetry,
    ) -> ObpResponse:
        return to_response(await call(connector, context), context)

    handle.__name__ = handle.__qualname__ = name
    return handle


async def handle_make_payment(
    request: ObpRequest,
    context: CallContext,
    connector: BackendConnector,
    telemetry: Telemetry,
) -> ObpResponse:
    """Payments additionally report amount/currency once the connector returns."""
    try:
        payment = parse_arguments(
            request, PaymentRequest, {"fromAccountId": request.account_id}
        )
    except InvalidPayloadError as e:
        return ObpResponse.error(INVALID_PAYLOAD, str(e), context)

    result = await connector.make_payment(payment, context)
    response = to_response(result, context)
    await telemetry.record_payment(
        context.correlation_id,
        payment.amount,
        payment.currency,
        response.is_success,
        response.error_code,
    )
    return response


handle_get_bank = _with_arguments(
    BankArguments,
    lambda c, a, ctx: c.get_bank(a.bank_id, ctx),
    "handle_get_bank",
)
handle_get_banks = _without_arguments(
    lambda c, ctx: c.get_banks(ctx),
    "handle_get_banks",
)
handle_get_bank_account = _with_arguments(
    AccountArguments,
    lambda c, a, ctx: c.get_bank_account(a.bank_id, a.account_id, ctx),
    "handle_get_bank_account",
)
handle_get_bank_accounts = _with_arguments(
    BankAccountsArguments,
    lambda c, a, ctx: c.get_bank_accounts(a.bank_id, a.account_ids, ctx),
    "handle_get_bank_accounts",
)
handle_get_account_balance = _with_arguments(
    AccountArguments,
    lambda c, a, ctx: c.get_account_balance(a.bank_id, a.account_id, ctx),
    "handle_get_account_balance",
)
handle_get_transaction = _with_arguments(
    TransactionArguments,
    lambda c, a, ctx: c.get_transaction(
        a.bank_id, a.account_id, a.transaction_id, ctx
    ),
    "handle_get_transaction",
)
handle_get_transactions = _with_arguments(
    TransactionQuery,
    lambda c, a, ctx: c.get_transactions(a, ctx),
    "handle_get_transactions",
)
handle_get_customer = _with_arguments(
    CustomerArguments,
    lambda c, a, ctx: c.get_customer(a.customer_id, ctx),
    "handle_get_customer",
)
handle_create_bank_account = _with_arguments(
    NewBankAccount,
    lambda c, a, ctx: c.create_bank_account(a, ctx),
    "handle_create_bank_account",
)
handle_update_bank_account = _with_arguments(
    BankAccountUpdate,
    lambda c, a, ctx: c.update_bank_account(a, ctx),
    "handle_update_bank_account",
)
handle_create_customer = _with_arguments(
    NewCustomer,
    lambda c, a, ctx: c.create_customer(a, ctx),
    "handle_create_customer",
)
handle_update_customer = _with_arguments(
    CustomerUpdate,
    lambda c, a, ctx: c.update_customer(a, ctx),
    "handle_update_customer",
)
handle_get_card = _with_arguments(
    CardArguments,
    lambda c, a, ctx: c.get_card(a.bank_id, a.card_id, ctx),
    "handle_get_card",
)
handle_get_counterparty = _with_arguments(
    CounterpartyArguments,
    lambda c, a, ctx: c.get_counterparty(a.counterparty_id, a.bank_id, ctx),
    "handle_get_counterparty",
)
handle_check_health = _without_arguments(
    lambda c, ctx: c.check_health(ctx),
    "handle_check_health",
)
handle_get_adapter_info = _without_arguments(
    lambda c, ctx: c.get_adapter_info(ctx),
    "handle_get_adapter_info",
)

DEFAULT_HANDLERS: dict[Action, Handler] = {
    Action.GET_BANK: handle_get_bank,
    Action.GET_BANKS: handle_get_banks,
    Action.GET_BANK_ACCOUNT: handle_get_bank_account,
    Action.GET_BANK_ACCOUNTS: handle_get_bank_accounts,
    Action.GET_ACCOUNT_BALANCE: handle_get_account_balance,
    Action.GET_TRANSACTION: handle_get_transaction,
    Action.GET_TRANSACTIONS: handle_get_transactions,
    Action.GET_CUSTOMER: handle_get_customer,
    Action.MAKE_PAYMENT: handle_make_payment,
    Action.CREATE_BANK_ACCOUNT: handle_create_bank_account,
    Action.UPDATE_BANK_ACCOUNT: handle_update_bank_account,
    Action.CREATE_CUSTOMER: handle_create_customer,
    Action.UPDATE_CUSTOMER: handle_update_customer,
    Action.GET_CARD: handle_get_card,
    Action.GET_COUNTERPARTY: handle_get_counterparty,
    Action.CHECK_HEALTH: handle_check_health,
    Action.GET_ADAPTER_INFO: handle_get_adapter_info,
}


def build_dispatch_table() -> DispatchTable:
    """Register the default handler for every action and freeze the table."""
    table = DispatchTable()
    for action, handler in DEFAULT_HANDLERS.items():
        table.register(action, handler)
    table.freeze()
    return table
