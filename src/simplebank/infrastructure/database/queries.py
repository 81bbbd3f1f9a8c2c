"""Single-statement ledger queries.

:class:`Queries` runs each statement either on its own short transaction
(bound to an ``Engine``) or inside a caller's transaction (bound to a
``Connection``). Both satisfy :class:`Querier`, the capability the transfer
operation depends on.

Database errors are translated into :mod:`simplebank.domain.errors` here,
at the statement boundary, with the SQLAlchemy exception kept as
``__cause__``.
"""

from __future__ import annotations

from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, Protocol

from sqlalchemy import delete, insert, or_, select, update
from sqlalchemy.engine import Engine
from sqlalchemy.exc import DBAPIError

from simplebank.domain.errors import (
    BankError,
    ConflictError,
    NotFoundError,
    StoreError,
    TransactionCancelled,
    ValidationError,
)
from simplebank.domain.models import Account, Entry, Transfer
from simplebank.infrastructure.database.schema import accounts, entries, transfers

if TYPE_CHECKING:
    from sqlalchemy import Connection, Executable

# SQLSTATE codes (PostgreSQL and other standard-following drivers)
_SERIALIZATION_FAILURE = "40001"
_DEADLOCK_DETECTED = "40P01"
_LOCK_NOT_AVAILABLE = "55P03"
_QUERY_CANCELED = "57014"
_FOREIGN_KEY_VIOLATION = "23503"

_CONFLICT_STATES = frozenset({_SERIALIZATION_FAILURE, _DEADLOCK_DETECTED, _LOCK_NOT_AVAILABLE})


class Querier(Protocol):
    """The four primitives a money transfer is composed from."""

    def create_transfer(self, from_account_id: int, to_account_id: int, amount: int) -> Transfer:
        ...

    def create_entry(self, account_id: int, amount: int) -> Entry:
        ...

    def get_account(self, account_id: int, *, for_update: bool = False) -> Account:
        ...

    def update_account(self, account_id: int, balance: int) -> Account:
        ...


def _sqlstate(exc: DBAPIError) -> str | None:
    orig = exc.orig
    # psycopg 3 exposes .sqlstate, psycopg2 exposes .pgcode
    return getattr(orig, "sqlstate", None) or getattr(orig, "pgcode", None)


def translate_db_error(
    exc: DBAPIError,
    *,
    cancelled: bool = False,
    foreign_key: BankError | None = None,
) -> BankError:
    """Map a DB-API failure onto the ledger error taxonomy.

    Args:
        exc: The SQLAlchemy-wrapped driver error.
        cancelled: The caller's deadline had passed when the error surfaced.
        foreign_key: Error to report for a foreign-key violation. Defaults to
            :class:`NotFoundError` (an insert referenced a missing account).
    """
    state = _sqlstate(exc)
    message = str(exc.orig)

    if cancelled or state == _QUERY_CANCELED or message == "interrupted":
        return TransactionCancelled(f"Transaction cancelled: {message}")
    if state in _CONFLICT_STATES or "database is locked" in message:
        return ConflictError(f"Transaction aborted by the database, retry it: {message}")
    if state == _FOREIGN_KEY_VIOLATION or "FOREIGN KEY constraint failed" in message:
        return foreign_key or NotFoundError(f"Referenced account does not exist: {message}")
    return StoreError(f"Database error: {message}")


class Queries:
    """Ledger CRUD bound to an ``Engine`` (autocommit) or a ``Connection``.

    Args:
        bind: An ``Engine`` runs each call in its own transaction; a
            ``Connection`` runs every call inside the caller's transaction.
        expired: Optional predicate checked before every statement. When it
            returns True the statement is not sent and
            :class:`TransactionCancelled` is raised instead.
    """

    def __init__(
        self,
        bind: Engine | Connection,
        *,
        expired: Callable[[], bool] | None = None,
    ) -> None:
        self._bind = bind
        self._expired = expired

    @property
    def in_transaction(self) -> bool:
        return not isinstance(self._bind, Engine)

    # ------------------------------------------------------------------
    # Statement execution
    # ------------------------------------------------------------------

    def _is_expired(self) -> bool:
        return self._expired is not None and self._expired()

    @contextmanager
    def _connection(self, *, foreign_key: BankError | None = None) -> Iterator[Connection]:
        if self._is_expired():
            raise TransactionCancelled("Transaction deadline exceeded before statement")
        try:
            if isinstance(self._bind, Engine):
                with self._bind.begin() as conn:
                    yield conn
            else:
                yield self._bind
        except DBAPIError as exc:
            raise translate_db_error(
                exc, cancelled=self._is_expired(), foreign_key=foreign_key
            ) from exc

    def _one(self, stmt: Executable, **kwargs: Any) -> dict[str, Any] | None:
        with self._connection(**kwargs) as conn:
            row = conn.execute(stmt).mappings().first()
        return dict(row) if row is not None else None

    def _all(self, stmt: Executable) -> list[dict[str, Any]]:
        with self._connection() as conn:
            return [dict(row) for row in conn.execute(stmt).mappings()]

    # ------------------------------------------------------------------
    # Accounts
    # ------------------------------------------------------------------

    def create_account(self, owner: str, currency: str, balance: int = 0) -> Account:
        row = self._one(
            insert(accounts)
            .values(owner=owner, currency=currency, balance=balance)
            .returning(*accounts.c)
        )
        return Account.model_validate(row)

    def get_account(self, account_id: int, *, for_update: bool = False) -> Account:
        """Fetch an account; ``for_update`` row-locks it until the transaction ends.

        The lock is ``FOR NO KEY UPDATE`` so that it does not conflict with
        the key-share locks foreign keys from entries/transfers take on the
        same row. SQLite ignores it (the transaction already holds the
        database write lock).
        """
        stmt = select(accounts).where(accounts.c.id == account_id)
        if for_update:
            stmt = stmt.with_for_update(key_share=True)
        row = self._one(stmt)
        if row is None:
            raise NotFoundError(f"No account found with ID: {account_id}")
        return Account.model_validate(row)

    def list_accounts(self, *, limit: int = 20, offset: int = 0) -> list[Account]:
        stmt = select(accounts).order_by(accounts.c.id).limit(limit).offset(offset)
        return [Account.model_validate(row) for row in self._all(stmt)]

    def update_account(self, account_id: int, balance: int) -> Account:
        row = self._one(
            update(accounts)
            .where(accounts.c.id == account_id)
            .values(balance=balance)
            .returning(*accounts.c)
        )
        if row is None:
            raise NotFoundError(f"No account found with ID: {account_id}")
        return Account.model_validate(row)

    def delete_account(self, account_id: int) -> None:
        """Delete an account with no ledger history."""
        has_history = ValidationError(
            f"Account {account_id} has entries or transfers and cannot be deleted"
        )
        row = self._one(
            delete(accounts).where(accounts.c.id == account_id).returning(accounts.c.id),
            foreign_key=has_history,
        )
        if row is None:
            raise NotFoundError(f"No account found with ID: {account_id}")

    # ------------------------------------------------------------------
    # Entries
    # ------------------------------------------------------------------

    def create_entry(self, account_id: int, amount: int) -> Entry:
        row = self._one(
            insert(entries).values(account_id=account_id, amount=amount).returning(*entries.c)
        )
        return Entry.model_validate(row)

    def get_entry(self, entry_id: int) -> Entry:
        row = self._one(select(entries).where(entries.c.id == entry_id))
        if row is None:
            raise NotFoundError(f"No entry found with ID: {entry_id}")
        return Entry.model_validate(row)

    def list_entries(self, account_id: int, *, limit: int = 20, offset: int = 0) -> list[Entry]:
        stmt = (
            select(entries)
            .where(entries.c.account_id == account_id)
            .order_by(entries.c.id)
            .limit(limit)
            .offset(offset)
        )
        return [Entry.model_validate(row) for row in self._all(stmt)]

    # ------------------------------------------------------------------
    # Transfers
    # ------------------------------------------------------------------

    def create_transfer(self, from_account_id: int, to_account_id: int, amount: int) -> Transfer:
        row = self._one(
            insert(transfers)
            .values(from_account_id=from_account_id, to_account_id=to_account_id, amount=amount)
            .returning(*transfers.c)
        )
        return Transfer.model_validate(row)

    def get_transfer(self, transfer_id: int) -> Transfer:
        row = self._one(select(transfers).where(transfers.c.id == transfer_id))
        if row is None:
            raise NotFoundError(f"No transfer found with ID: {transfer_id}")
        return Transfer.model_validate(row)

    def list_transfers(
        self, account_id: int, *, limit: int = 20, offset: int = 0
    ) -> list[Transfer]:
        """Transfers where *account_id* is either the source or the destination."""
        stmt = (
            select(transfers)
            .where(
                or_(
                    transfers.c.from_account_id == account_id,
                    transfers.c.to_account_id == account_id,
                )
            )
            .order_by(transfers.c.id)
            .limit(limit)
            .offset(offset)
        )
        return [Transfer.model_validate(row) for row in self._all(stmt)]
