"""BackendConnector — capability port a core-banking integration implements."""

from __future__ import annotations

from typing import TYPE_CHECKING, Protocol, runtime_checkable

if TYPE_CHECKING:
    from ..models import (
        AccountBalance,
        AdapterInfo,
        BackendResult,
        Bank,
        BankAccount,
        BankAccountUpdate,
        CallContext,
        Card,
        Counterparty,
        Customer,
        CustomerUpdate,
        HealthStatus,
        NewBankAccount,
        NewCustomer,
        PaymentRequest,
        PaymentResult,
        Transaction,
        TransactionQuery,
    )


@runtime_checkable
class BackendConnector(Protocol):
    """
    Port for a core-banking backend, one async method per supported action.

    Every method returns a ``BackendResult``: ``Success(data)`` or
    ``Failure(code, message)``. An operation the backend does not support must
    return ``Failure("NOT_IMPLEMENTED", ...)`` instead of raising; raising is a
    contract violation the router converts to ``CBS_ERROR``.

    The router never retries; retry policy (if any) belongs to the connector.
    Implementations must be safe for concurrent use and should be idempotent
    under redelivery of the same message.
    """

    name: str

    async def get_bank(
        self, bank_id: str, context: CallContext
    ) -> BackendResult[Bank]: ...

    async def get_banks(self, context: CallContext) -> BackendResult[list[Bank]]: ...

    async def get_bank_account(
        self, bank_id: str, account_id: str, context: CallContext
    ) -> BackendResult[BankAccount]: ...

    async def get_bank_accounts(
        self, bank_id: str, account_ids: list[str] | None, context: CallContext
    ) -> BackendResult[list[BankAccount]]: ...

    async def get_account_balance(
        self, bank_id: str, account_id: str, context: CallContext
    ) -> BackendResult[AccountBalance]: ...

    async def get_transaction(
        self,
        bank_id: str,
        account_id: str,
        transaction_id: str,
        context: CallContext,
    ) -> BackendResult[Transaction]: ...

    async def get_transactions(
        self, query: TransactionQuery, context: CallContext
    ) -> BackendResult[list[Transaction]]: ...

    async def get_customer(
        self, customer_id: str, context: CallContext
    ) -> BackendResult[Customer]: ...

    async def make_payment(
        self, payment: PaymentRequest, context: CallContext
    ) -> BackendResult[PaymentResult]: ...

    async def create_bank_account(
        self, account: NewBankAccount, context: CallContext
    ) -> BackendResult[BankAccount]: ...

    async def update_bank_account(
        self, update: BankAccountUpdate, context: CallContext
    ) -> BackendResult[BankAccount]: ...

    async def create_customer(
        self, customer: NewCustomer, context: CallContext
    ) -> BackendResult[Customer]: ...

    async def update_customer(
        self, update: CustomerUpdate, context: CallContext
    ) -> BackendResult[Customer]: ...

    async def get_card(
        self, bank_id: str, card_id: str, context: CallContext
    ) -> BackendResult[Card]: ...

    async def get_counterparty(
        self, counterparty_id: str, bank_id: str | None, context: CallContext
    ) -> BackendResult[Counterparty]: ...

    async def check_health(self, context: CallContext) -> BackendResult[HealthStatus]:
        """Probe the backend. Also used by the status surface."""
        ...

    async def get_adapter_info(
        self, context: CallContext
    ) -> BackendResult[AdapterInfo]: ...
