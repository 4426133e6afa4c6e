"""Envelope model, call context, backend results and banking domain types."""

from __future__ import annotations

from .arguments import (
    AccountArguments,
    ActionArguments,
    BankAccountsArguments,
    BankAccountUpdate,
    BankArguments,
    CardArguments,
    CounterpartyArguments,
    CustomerArguments,
    CustomerUpdate,
    NewBankAccount,
    NewCustomer,
    PaymentRequest,
    TransactionArguments,
    TransactionQuery,
)
from .banking import (
    AccountBalance,
    AdapterInfo,
    Bank,
    BankAccount,
    Card,
    Counterparty,
    Customer,
    HealthStatus,
    PaymentResult,
    Transaction,
    User,
)
from .context import CallContext
from .envelope import Action, ObpRequest, ObpResponse, ResponseStatus, WireModel
from .result import NOT_IMPLEMENTED, BackendResult, Failure, Success, not_implemented

__all__ = [
    "NOT_IMPLEMENTED",
    "AccountArguments",
    "AccountBalance",
    "Action",
    "ActionArguments",
    "AdapterInfo",
    "BackendResult",
    "Bank",
    "BankAccount",
    "BankAccountUpdate",
    "BankAccountsArguments",
    "BankArguments",
    "CallContext",
    "Card",
    "CardArguments",
    "Counterparty",
    "CounterpartyArguments",
    "Customer",
    "CustomerArguments",
    "CustomerUpdate",
    "Failure",
    "HealthStatus",
    "NewBankAccount",
    "NewCustomer",
    "ObpRequest",
    "ObpResponse",
    "PaymentRequest",
    "PaymentResult",
    "ResponseStatus",
    "Success",
    "Transaction",
    "TransactionArguments",
    "TransactionQuery",
    "User",
    "WireModel",
    "not_implemented",
]
