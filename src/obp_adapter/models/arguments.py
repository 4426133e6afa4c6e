"""Typed arguments extracted from a request ``payload``, one model per action.

Handlers validate the payload against these models; a validation failure
becomes an ``INVALID_PAYLOAD`` response and never reaches the connector.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import ConfigDict, Field

from .envelope import WireModel

_CURRENCY = r"^[A-Z]{3}$"


class ActionArguments(WireModel):
    model_config = ConfigDict(extra="ignore")


class BankArguments(ActionArguments):
    bank_id: str = Field(..., min_length=1)


class AccountArguments(BankArguments):
    account_id: str = Field(..., min_length=1)


class BankAccountsArguments(BankArguments):
    account_ids: list[str] | None = None


class TransactionArguments(AccountArguments):
    transaction_id: str = Field(..., min_length=1)


class TransactionQuery(AccountArguments):
    from_date: datetime | None = None
    to_date: datetime | None = None
    limit: int | None = Field(default=None, ge=1, le=1000)
    offset: int = Field(default=0, ge=0)


class CustomerArguments(ActionArguments):
    customer_id: str = Field(..., min_length=1)


class CardArguments(BankArguments):
    card_id: str = Field(..., min_length=1)


class CounterpartyArguments(ActionArguments):
    counterparty_id: str = Field(..., min_length=1)
    bank_id: str | None = None


class PaymentRequest(ActionArguments):
    """Payment instruction.

    ``from_account_id`` falls back to the envelope's ``accountId``. One of
    ``to_account_id`` / ``counterparty_id`` names the beneficiary.
    """

    bank_id: str = Field(..., min_length=1)
    from_account_id: str = Field(..., min_length=1)
    amount: Decimal = Field(..., gt=0)
    currency: str = Field(..., pattern=_CURRENCY)
    to_bank_id: str | None = None
    to_account_id: str | None = None
    counterparty_id: str | None = None
    description: str | None = None
    transaction_request_id: str | None = None


class NewBankAccount(ActionArguments):
    bank_id: str = Field(..., min_length=1)
    account_type: str = Field(..., min_length=1)
    currency: str = Field(..., pattern=_CURRENCY)
    label: str = ""
    name: str | None = None
    owner_user_id: str | None = None
    branch_id: str | None = None
    initial_balance: Decimal = Decimal("0")


class BankAccountUpdate(AccountArguments):
    label: str | None = None
    account_type: str | None = None
    branch_id: str | None = None


class NewCustomer(ActionArguments):
    bank_id: str = Field(..., min_length=1)
    legal_name: str = Field(..., min_length=1)
    customer_number: str | None = None
    mobile_phone_number: str | None = None
    email: str | None = None
    date_of_birth: date | None = None
    relationship_status: str = "single"


class CustomerUpdate(CustomerArguments):
    legal_name: str | None = None
    mobile_phone_number: str | None = None
    email: str | None = None
    relationship_status: str | None = None
    kyc_status: bool | None = None
