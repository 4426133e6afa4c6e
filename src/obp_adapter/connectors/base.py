"""NotImplementedConnector — conforming default for every connector operation."""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from .. import __version__
from ..models import Action, AdapterInfo, HealthStatus, Success, not_implemented
from ..ports.connector import BackendConnector

if TYPE_CHECKING:
    from ..models import BackendResult, CallContext, Failure


class NotImplementedConnector(BackendConnector):
    """Returns ``NOT_IMPLEMENTED`` for every banking operation.

    Subclass it and override only the operations your backend supports; the
    rest keep answering with a structured domain error rather than raising.
    ``check_health`` and ``get_adapter_info`` have working defaults.
    """

    name = "not-implemented"
    version = __version__

    def _unsupported(self, operation: str, context: CallContext) -> Failure:
        return not_implemented(operation, context)

    async def get_bank(self, bank_id: str, context: CallContext) -> BackendResult[Any]:
        return self._unsupported("getBank", context)

    async def get_banks(self, context: CallContext) -> BackendResult[Any]:
        return self._unsupported("getBanks", context)

    async def get_bank_account(
        self, bank_id: str, account_id: str, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("getBankAccount", context)

    async def get_bank_accounts(
        self, bank_id: str, account_ids: list[str] | None, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("getBankAccounts", context)

    async def get_account_balance(
        self, bank_id: str, account_id: str, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("getAccountBalance", context)

    async def get_transaction(
        self,
        bank_id: str,
        account_id: str,
        transaction_id: str,
        context: CallContext,
    ) -> BackendResult[Any]:
        return self._unsupported("getTransaction", context)

    async def get_transactions(
        self, query: Any, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("getTransactions", context)

    async def get_customer(
        self, customer_id: str, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("getCustomer", context)

    async def make_payment(
        self, payment: Any, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("makePayment", context)

    async def create_bank_account(
        self, account: Any, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("createBankAccount", context)

    async def update_bank_account(
        self, update: Any, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("updateBankAccount", context)

    async def create_customer(
        self, customer: Any, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("createCustomer", context)

    async def update_customer(
        self, update: Any, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("updateCustomer", context)

    async def get_card(
        self, bank_id: str, card_id: str, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("getCard", context)

    async def get_counterparty(
        self, counterparty_id: str, bank_id: str | None, context: CallContext
    ) -> BackendResult[Any]:
        return self._unsupported("getCounterparty", context)

    async def check_health(self, context: CallContext) -> BackendResult[HealthStatus]:
        return Success(
            HealthStatus(status="up", message=f"{self.name} connector is alive"),
            context,
        )

    async def get_adapter_info(
        self, context: CallContext
    ) -> BackendResult[AdapterInfo]:
        return Success(
            AdapterInfo(
                name="obp-adapter",
                version=self.version,
                connector=self.name,
                supported_actions=[a.value for a in Action],
            ),
            context,
        )
