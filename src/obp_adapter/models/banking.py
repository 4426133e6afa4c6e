"""Banking domain models returned by connectors.

Monetary amounts are ``Decimal`` and serialize as strings on the wire.
"""

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal

from pydantic import Field

from .envelope import WireModel


class Bank(WireModel):
    bank_id: str
    short_name: str
    full_name: str | None = None
    logo_url: str | None = None
    website_url: str | None = None
    bank_routing_scheme: str | None = None
    bank_routing_address: str | None = None


class BankAccount(WireModel):
    bank_id: str
    account_id: str
    account_type: str
    balance: Decimal
    currency: str
    name: str
    label: str
    number: str
    owners: list[str] = Field(default_factory=list)
    iban: str | None = None
    swift_bic: str | None = None
    branch_id: str | None = None


class AccountBalance(WireModel):
    bank_id: str
    account_id: str
    amount: Decimal
    currency: str
    balance_type: str = "closingBooked"
    last_updated: datetime | None = None


class Transaction(WireModel):
    transaction_id: str
    account_id: str
    amount: Decimal
    currency: str
    description: str
    posted: datetime
    completed: datetime
    transaction_type: str
    balance_after: Decimal
    counterparty_account_id: str | None = None
    counterparty_name: str | None = None


class Customer(WireModel):
    customer_id: str
    customer_number: str
    legal_name: str
    mobile_phone_number: str | None = None
    email: str | None = None
    date_of_birth: date | None = None
    relationship_status: str
    kyc_status: bool
    bank_id: str | None = None


class User(WireModel):
    user_id: str
    username: str
    email: str | None = None
    first_name: str | None = None
    last_name: str | None = None


class Card(WireModel):
    card_id: str
    bank_id: str
    card_number: str
    card_type: str
    name_on_card: str
    account_id: str | None = None
    expires_date: date | None = None
    enabled: bool = True


class Counterparty(WireModel):
    counterparty_id: str
    name: str
    bank_id: str | None = None
    other_account_routing_scheme: str | None = None
    other_account_routing_address: str | None = None
    other_bank_routing_scheme: str | None = None
    other_bank_routing_address: str | None = None
    currency: str | None = None


class PaymentResult(WireModel):
    transaction_id: str
    status: str
    amount: Decimal
    currency: str
    from_account_id: str
    to_account_id: str | None = None
    counterparty_id: str | None = None


class HealthStatus(WireModel):
    status: str
    message: str | None = None
    response_time_ms: float | None = None
    details: dict[str, str] = Field(default_factory=dict)


class AdapterInfo(WireModel):
    name: str
    version: str
    description: str | None = None
    connector: str | None = None
    supported_actions: list[str] = Field(default_factory=list)
