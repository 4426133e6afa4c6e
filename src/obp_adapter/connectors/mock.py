"""MockConnector — in-memory sample backend for demos, local runs and tests."""

from __future__ import annotations

import asyncio
import logging
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import TYPE_CHECKING

from ..models import (
    AccountBalance,
    Bank,
    BankAccount,
    Card,
    Counterparty,
    Customer,
    Failure,
    PaymentResult,
    Success,
    Transaction,
)
from .base import NotImplementedConnector

if TYPE_CHECKING:
    from ..models import (
        BackendResult,
        BankAccountUpdate,
        CallContext,
        CustomerUpdate,
        NewBankAccount,
        NewCustomer,
        PaymentRequest,
        TransactionQuery,
    )

logger = logging.getLogger("obp_adapter.connectors.mock")


class MockConnector(NotImplementedConnector):
    """Serves a small seeded data set and books payments between its accounts.

    Payments are idempotent on ``transaction_request_id`` so a redelivered
    ``makePayment`` request does not debit twice.
    """

    name = "mock"

    def __init__(self, *, seed: bool = True) -> None:
        self._banks: dict[str, Bank] = {}
        self._accounts: dict[tuple[str, str], BankAccount] = {}
        self._transactions: dict[str, Transaction] = {}
        self._customers: dict[str, Customer] = {}
        self._cards: dict[tuple[str, str], Card] = {}
        self._counterparties: dict[str, Counterparty] = {}
        self._payments: dict[str, PaymentResult] = {}
        self._lock = asyncio.Lock()
        if seed:
            self._seed()

    def _seed(self) -> None:
        now = datetime(2025, 1, 15, 9, 30, tzinfo=timezone.utc)
        self.add_bank(
            Bank(
                bank_id="gh.29.uk",
                short_name="Mock Bank",
                full_name="Mock Bank of Testing plc",
                website_url="https://mockbank.example",
                bank_routing_scheme="OBP",
                bank_routing_address="gh.29.uk",
            )
        )
        self.add_account(
            BankAccount(
                bank_id="gh.29.uk",
                account_id="acc-001",
                account_type="CURRENT",
                balance=Decimal("1500.00"),
                currency="EUR",
                name="Alice Current",
                label="Main account",
                number="12345678",
                owners=["alice"],
                iban="DE89370400440532013000",
                swift_bic="MOCKDEFF",
            )
        )
        self.add_account(
            BankAccount(
                bank_id="gh.29.uk",
                account_id="acc-002",
                account_type="SAVINGS",
                balance=Decimal("250.00"),
                currency="EUR",
                name="Bob Savings",
                label="Rainy day",
                number="87654321",
                owners=["bob"],
            )
        )
        self._transactions["tx-001"] = Transaction(
            transaction_id="tx-001",
            account_id="acc-001",
            amount=Decimal("-20.50"),
            currency="EUR",
            description="Coffee beans",
            posted=now,
            completed=now,
            transaction_type="CARD",
            balance_after=Decimal("1500.00"),
            counterparty_name="Roastery",
        )
        self._customers["cust-001"] = Customer(
            customer_id="cust-001",
            customer_number="0001",
            legal_name="Alice Example",
            email="alice@example.com",
            relationship_status="single",
            kyc_status=True,
            bank_id="gh.29.uk",
        )
        self._cards[("gh.29.uk", "card-001")] = Card(
            card_id="card-001",
            bank_id="gh.29.uk",
            card_number="4111********1111",
            card_type="DEBIT",
            name_on_card="ALICE EXAMPLE",
            account_id="acc-001",
        )
        self._counterparties["cp-001"] = Counterparty(
            counterparty_id="cp-001",
            name="Roastery",
            bank_id="gh.29.uk",
            other_account_routing_scheme="IBAN",
            other_account_routing_address="GB33BUKB20201555555555",
            currency="EUR",
        )

    def add_bank(self, bank: Bank) -> None:
        self._banks[bank.bank_id] = bank

    def add_account(self, account: BankAccount) -> None:
        self._accounts[(account.bank_id, account.account_id)] = account

    async def get_bank(self, bank_id: str, context: CallContext) -> BackendResult[Bank]:
        bank = self._banks.get(bank_id)
        if bank is None:
            return Failure("BANK_NOT_FOUND", f"Bank {bank_id} not found", context)
        return Success(bank, context)

    async def get_banks(self, context: CallContext) -> BackendResult[list[Bank]]:
        return Success(list(self._banks.values()), context)

    def _account(
        self, bank_id: str, account_id: str, context: CallContext
    ) -> BackendResult[BankAccount]:
        if bank_id not in self._banks:
            return Failure("BANK_NOT_FOUND", f"Bank {bank_id} not found", context)
        account = self._accounts.get((bank_id, account_id))
        if account is None:
            return Failure(
                "ACCOUNT_NOT_FOUND",
                f"Account {account_id} not found at bank {bank_id}",
                context,
            )
        return Success(account, context)

    async def get_bank_account(
        self, bank_id: str, account_id: str, context: CallContext
    ) -> BackendResult[BankAccount]:
        return self._account(bank_id, account_id, context)

    async def get_bank_accounts(
        self, bank_id: str, account_ids: list[str] | None, context: CallContext
    ) -> BackendResult[list[BankAccount]]:
        if bank_id not in self._banks:
            return Failure("BANK_NOT_FOUND", f"Bank {bank_id} not found", context)
        accounts = [
            account
            for (bid, aid), account in self._accounts.items()
            if bid == bank_id and (account_ids is None or aid in account_ids)
        ]
        return Success(accounts, context)

    async def get_account_balance(
        self, bank_id: str, account_id: str, context: CallContext
    ) -> BackendResult[AccountBalance]:
        result = self._account(bank_id, account_id, context)
        if not isinstance(result, Success):
            return result
        account = result.data
        return Success(
            AccountBalance(
                bank_id=bank_id,
                account_id=account_id,
                amount=account.balance,
                currency=account.currency,
                last_updated=datetime.now(timezone.utc),
            ),
            context,
        )

    async def get_transaction(
        self,
        bank_id: str,
        account_id: str,
        transaction_id: str,
        context: CallContext,
    ) -> BackendResult[Transaction]:
        tx = self._transactions.get(transaction_id)
        if tx is None or tx.account_id != account_id:
            return Failure(
                "TRANSACTION_NOT_FOUND",
                f"Transaction {transaction_id} not found",
                context,
            )
        return Success(tx, context)

    async def get_transactions(
        self, query: TransactionQuery, context: CallContext
    ) -> BackendResult[list[Transaction]]:
        result = self._account(query.bank_id, query.account_id, context)
        if not isinstance(result, Success):
            return result
        txs = sorted(
            (
                tx
                for tx in self._transactions.values()
                if tx.account_id == query.account_id
                and (query.from_date is None or tx.posted >= query.from_date)
                and (query.to_date is None or tx.posted <= query.to_date)
            ),
            key=lambda tx: tx.posted,
            reverse=True,
        )
        end = None if query.limit is None else query.offset + query.limit
        return Success(txs[query.offset : end], context)

    async def get_customer(
        self, customer_id: str, context: CallContext
    ) -> BackendResult[Customer]:
        customer = self._customers.get(customer_id)
        if customer is None:
            return Failure(
                "CUSTOMER_NOT_FOUND", f"Customer {customer_id} not found", context
            )
        return Success(customer, context)

    async def make_payment(
        self, payment: PaymentRequest, context: CallContext
    ) -> BackendResult[PaymentResult]:
        async with self._lock:
            key = payment.transaction_request_id
            if key is not None and key in self._payments:
                logger.info("Replaying payment result for request %s", key)
                return Success(self._payments[key], context)

            source = self._account(payment.bank_id, payment.from_account_id, context)
            if not isinstance(source, Success):
                return source
            from_account = source.data
            if from_account.currency != payment.currency:
                return Failure(
                    "CURRENCY_MISMATCH",
                    f"Account currency is {from_account.currency}, "
                    f"payment currency is {payment.currency}",
                    context,
                )
            if from_account.balance < payment.amount:
                return Failure("INSUFFICIENT_FUNDS", "Insufficient funds", context)

            target: BankAccount | None = None
            if payment.to_account_id is None and payment.counterparty_id is None:
                return Failure(
                    "BENEFICIARY_MISSING",
                    "Either toAccountId or counterpartyId is required",
                    context,
                )
            if payment.to_account_id is not None:
                to_bank = payment.to_bank_id or payment.bank_id
                dest = self._account(to_bank, payment.to_account_id, context)
                if not isinstance(dest, Success):
                    return dest
                target = dest.data
            elif payment.counterparty_id not in self._counterparties:
                return Failure(
                    "COUNTERPARTY_NOT_FOUND",
                    f"Counterparty {payment.counterparty_id} not found",
                    context,
                )

            tx_id = str(uuid.uuid4())
            now = datetime.now(timezone.utc)
            new_balance = from_account.balance - payment.amount
            self.add_account(from_account.model_copy(update={"balance": new_balance}))
            self._transactions[tx_id] = Transaction(
                transaction_id=tx_id,
                account_id=from_account.account_id,
                amount=-payment.amount,
                currency=payment.currency,
                description=payment.description or "Payment",
                posted=now,
                completed=now,
                transaction_type="SEPA",
                balance_after=new_balance,
                counterparty_account_id=payment.to_account_id,
            )
            if target is not None:
                self.add_account(
                    target.model_copy(
                        update={"balance": target.balance + payment.amount}
                    )
                )

            result = PaymentResult(
                transaction_id=tx_id,
                status="COMPLETED",
                amount=payment.amount,
                currency=payment.currency,
                from_account_id=from_account.account_id,
                to_account_id=payment.to_account_id,
                counterparty_id=payment.counterparty_id,
            )
            if key is not None:
                self._payments[key] = result
            return Success(result, context)

    async def create_bank_account(
        self, account: NewBankAccount, context: CallContext
    ) -> BackendResult[BankAccount]:
        if account.bank_id not in self._banks:
            return Failure(
                "BANK_NOT_FOUND", f"Bank {account.bank_id} not found", context
            )
        account_id = f"acc-{uuid.uuid4().hex[:8]}"
        owners = [context.username or context.user_id or ""]
        created = BankAccount(
            bank_id=account.bank_id,
            account_id=account_id,
            account_type=account.account_type,
            balance=account.initial_balance,
            currency=account.currency,
            name=account.name or account.label or account_id,
            label=account.label,
            number=uuid.uuid4().hex[:8],
            owners=[o for o in owners if o],
            branch_id=account.branch_id,
        )
        self.add_account(created)
        return Success(created, context)

    async def update_bank_account(
        self, update: BankAccountUpdate, context: CallContext
    ) -> BackendResult[BankAccount]:
        result = self._account(update.bank_id, update.account_id, context)
        if not isinstance(result, Success):
            return result
        changes = update.model_dump(
            include={"label", "account_type", "branch_id"}, exclude_none=True
        )
        updated = result.data.model_copy(update=changes)
        self.add_account(updated)
        return Success(updated, context)

    async def create_customer(
        self, customer: NewCustomer, context: CallContext
    ) -> BackendResult[Customer]:
        customer_id = f"cust-{uuid.uuid4().hex[:8]}"
        created = Customer(
            customer_id=customer_id,
            customer_number=customer.customer_number
            or str(len(self._customers) + 1).zfill(4),
            legal_name=customer.legal_name,
            mobile_phone_number=customer.mobile_phone_number,
            email=customer.email,
            date_of_birth=customer.date_of_birth,
            relationship_status=customer.relationship_status,
            kyc_status=False,
            bank_id=customer.bank_id,
        )
        self._customers[customer_id] = created
        return Success(created, context)

    async def update_customer(
        self, update: CustomerUpdate, context: CallContext
    ) -> BackendResult[Customer]:
        existing = self._customers.get(update.customer_id)
        if existing is None:
            return Failure(
                "CUSTOMER_NOT_FOUND",
                f"Customer {update.customer_id} not found",
                context,
            )
        changes = update.model_dump(exclude={"customer_id"}, exclude_none=True)
        updated = existing.model_copy(update=changes)
        self._customers[update.customer_id] = updated
        return Success(updated, context)

    async def get_card(
        self, bank_id: str, card_id: str, context: CallContext
    ) -> BackendResult[Card]:
        card = self._cards.get((bank_id, card_id))
        if card is None:
            return Failure("CARD_NOT_FOUND", f"Card {card_id} not found", context)
        return Success(card, context)

    async def get_counterparty(
        self, counterparty_id: str, bank_id: str | None, context: CallContext
    ) -> BackendResult[Counterparty]:
        counterparty = self._counterparties.get(counterparty_id)
        if counterparty is None or (
            bank_id is not None and counterparty.bank_id != bank_id
        ):
            return Failure(
                "COUNTERPARTY_NOT_FOUND",
                f"Counterparty {counterparty_id} not found",
                context,
            )
        return Success(counterparty, context)
