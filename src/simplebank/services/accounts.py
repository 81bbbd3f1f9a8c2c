"""AccountService: account lifecycle and ledger history reads."""

from __future__ import annotations

from simplebank.domain.errors import BankError, ValidationError
from simplebank.services._helpers import check_page
from simplebank.services.base import BaseService, traced
from simplebank.services.result import ServiceResult


class AccountService(BaseService):
    """Create, read, list, and delete accounts; list their ledger entries."""

    @traced
    def create(self, owner: str, *, currency: str = "USD", balance: int = 0) -> ServiceResult:
        op = "create_account"
        owner = owner.strip()
        currency = currency.strip().upper()
        try:
            if not owner:
                raise ValidationError("Account owner must not be empty")
            if len(currency) != 3 or not currency.isalpha():
                raise ValidationError(f"Currency must be a 3-letter code, got {currency!r}")
            account = self._store.queries.create_account(owner, currency, balance)
        except BankError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=account.model_dump(mode="json"))

    @traced
    def get(self, account_id: int) -> ServiceResult:
        op = "get_account"
        try:
            account = self._store.queries.get_account(account_id)
        except BankError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=account.model_dump(mode="json"))

    @traced
    def list_accounts(self, *, limit: int = 20, offset: int = 0) -> ServiceResult:
        op = "list_accounts"
        try:
            check_page(limit, offset)
            items = self._store.queries.list_accounts(limit=limit, offset=offset)
        except BankError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={"items": [a.model_dump(mode="json") for a in items], "count": len(items)},
        )

    @traced
    def delete(self, account_id: int) -> ServiceResult:
        op = "delete_account"
        try:
            self._store.queries.delete_account(account_id)
        except BankError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data={"id": account_id})

    @traced
    def entries(self, account_id: int, *, limit: int = 20, offset: int = 0) -> ServiceResult:
        """List the ledger entries of an account, oldest first."""
        op = "list_entries"
        try:
            check_page(limit, offset)
            # Raises NOT_FOUND for unknown accounts instead of an empty list.
            self._store.queries.get_account(account_id)
            items = self._store.queries.list_entries(account_id, limit=limit, offset=offset)
        except BankError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "account_id": account_id,
                "items": [e.model_dump(mode="json") for e in items],
                "count": len(items),
            },
        )
