"""Store: transaction execution and the money-transfer operation.

The Store is the single dependency injected into every service. It owns the
SQLAlchemy engine and exposes:

- :attr:`Store.queries`: single statements, each in its own transaction.
- :meth:`Store.execute`: runs a unit of work against a transaction-bound
  :class:`Querier`, then commits or rolls back.
- :meth:`Store.transfer_tx`: moves money between two accounts as one unit
  of work.

**Concurrency.** A Store is safe to share between threads. Each
:meth:`execute` call checks out its own pooled connection and never shares
it. Balance read-modify-write is protected by row locks
(``SELECT ... FOR NO KEY UPDATE`` on PostgreSQL, ``BEGIN IMMEDIATE`` on
SQLite), and the two balance updates of a transfer always lock the lower
account id first so that opposite-direction transfers cannot deadlock.
Nothing is retried here; a :class:`ConflictError` goes back to the caller.
"""

from __future__ import annotations

import logging
import threading
import time
from collections.abc import Callable
from contextlib import nullcontext
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, TypeVar

import structlog
from sqlalchemy.exc import ArgumentError, DBAPIError

from simplebank.config.models import normalize_isolation_level
from simplebank.domain.errors import (
    CommitError,
    ConflictError,
    RollbackError,
    TransactionCancelled,
    ValidationError,
)
from simplebank.domain.models import TransferRequest, TransferResult, validate_transfer
from simplebank.domain.ordering import balance_update_order
from simplebank.infrastructure.database.engine import (
    init_database,
    interrupt_when,
    lock_wait_limit,
    set_statement_timeout,
)
from simplebank.infrastructure.database.queries import Querier, Queries, translate_db_error
from simplebank.telemetry import trace_span

if TYPE_CHECKING:
    from sqlalchemy.engine import Engine

    from simplebank.config.settings import BankSettings

logger = logging.getLogger(__name__)

_T = TypeVar("_T")


@dataclass(frozen=True)
class TxOptions:
    """Per-call transaction options.

    Attributes:
        isolation_level: Overrides the configured isolation level.
        timeout: Seconds the whole transaction may take, measured from
            the :meth:`Store.execute` call.
        cancel: Set this event from another thread to abort the transaction.
        label: Name attached to the transaction's log events.
    """

    isolation_level: str | None = None
    timeout: float | None = None
    cancel: threading.Event | None = field(default=None, compare=False)
    label: str | None = None


class _Deadline:
    """Expiry predicate combining a monotonic deadline and a cancel event."""

    def __init__(self, timeout: float | None, cancel: threading.Event | None) -> None:
        self._at = time.monotonic() + timeout if timeout is not None else None
        self._cancel = cancel

    @property
    def bounded(self) -> bool:
        return self._at is not None or self._cancel is not None

    def remaining(self) -> float | None:
        if self._at is None:
            return None
        return max(0.0, self._at - time.monotonic())

    def expired(self) -> bool:
        if self._cancel is not None and self._cancel.is_set():
            return True
        return self._at is not None and time.monotonic() >= self._at


class Store:
    """Transactional access to the ledger database.

    Args:
        settings: Resolved settings; ``[database]`` picks the engine and the
            default isolation level.
        engine: Use this engine instead of creating one from *settings*.
            Its tables must already exist.
    """

    def __init__(self, settings: BankSettings, *, engine: Engine | None = None) -> None:
        self._settings = settings
        self._engine: Engine = engine if engine is not None else init_database(settings)
        self._queries = Queries(self._engine)

    @property
    def engine(self) -> Engine:
        return self._engine

    @property
    def settings(self) -> BankSettings:
        return self._settings

    @property
    def queries(self) -> Queries:
        """Non-transactional queries: every call commits on its own."""
        return self._queries

    def close(self) -> None:
        """Dispose of the engine's connection pool."""
        self._engine.dispose()

    # ------------------------------------------------------------------
    # Transaction executor
    # ------------------------------------------------------------------

    def _isolation_level(self, options: TxOptions) -> str | None:
        try:
            level = normalize_isolation_level(options.isolation_level)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        return level or self._settings.database.isolation_level

    def execute(
        self,
        unit_of_work: Callable[[Querier], _T],
        options: TxOptions | None = None,
    ) -> _T:
        """Run *unit_of_work* inside one database transaction and return its result.

        The unit of work is called exactly once with a :class:`Querier`
        bound to the open transaction. If it raises, the transaction is
        rolled back and the error re-raised; if the rollback fails too,
        :class:`RollbackError` carries both failures. If it returns, the
        transaction is committed; a failed commit raises
        :class:`CommitError` (or :class:`ConflictError` when the database
        aborted the transaction at commit time).

        Raises:
            TransactionCancelled: The deadline passed or the cancel event was
                set, before or during the transaction.
            ValidationError: The isolation level is unknown or unsupported
                by the database.
        """
        options = options or TxOptions()
        isolation_level = self._isolation_level(options)
        deadline = _Deadline(options.timeout, options.cancel)
        if deadline.expired():
            raise TransactionCancelled("Transaction deadline exceeded before begin")

        try:
            conn = self._engine.connect()
        except DBAPIError as exc:
            raise translate_db_error(exc) from exc

        with conn:
            if isolation_level is not None:
                try:
                    conn.execution_options(isolation_level=isolation_level)
                except ArgumentError as exc:
                    raise ValidationError(str(exc)) from exc

            # SQLite's BEGIN IMMEDIATE waits for other writers; the wait ends at the deadline.
            capped = False
            try:
                with lock_wait_limit(conn, deadline.remaining()) as capped:
                    tx = conn.begin()
            except DBAPIError as exc:
                failure = translate_db_error(exc, cancelled=deadline.expired())
                if capped and isinstance(failure, ConflictError):
                    failure = TransactionCancelled(
                        f"Transaction deadline exceeded waiting for a lock: {exc.orig}"
                    )
                raise failure from exc

            # The interrupt hook is removed before rollback/commit run.
            guard = interrupt_when(conn, deadline.expired) if deadline.bounded else nullcontext()
            try:
                with guard:
                    remaining = deadline.remaining()
                    if remaining is not None:
                        set_statement_timeout(conn, remaining)
                    result = unit_of_work(Queries(conn, expired=deadline.expired))
            except Exception as exc:
                error: Exception = exc
                if isinstance(exc, DBAPIError):
                    error = translate_db_error(exc, cancelled=deadline.expired())
                try:
                    tx.rollback()
                except Exception as rb_exc:
                    logger.error("Rollback failed after %r: %r", error, rb_exc)
                    raise RollbackError(error, rb_exc) from error
                logger.debug("Transaction rolled back: %r", error)
                if error is exc:
                    raise
                raise error from exc

            try:
                tx.commit()
            except DBAPIError as exc:
                translated = translate_db_error(exc, cancelled=deadline.expired())
                if isinstance(translated, ConflictError):
                    raise translated from exc
                raise CommitError(f"Commit failed, outcome unknown: {exc.orig}") from exc
            except Exception as exc:
                raise CommitError(f"Commit failed, outcome unknown: {exc}") from exc

        return result

    # ------------------------------------------------------------------
    # Money transfer
    # ------------------------------------------------------------------

    def transfer_tx(
        self,
        request: TransferRequest,
        options: TxOptions | None = None,
    ) -> TransferResult:
        """Move ``request.amount`` from one account to another atomically.

        Creates the transfer record, a debit entry on the source, a credit
        entry on the destination, and updates both balances, all in one
        transaction. The balances are updated lower account id first.

        Raises:
            ValidationError: Non-positive amount or identical accounts. No
                transaction is opened.
            NotFoundError: Either account does not exist.
            ConflictError: The database aborted the transaction; the whole
                transfer may be retried.
        """
        errors = validate_transfer(request)
        if errors:
            raise ValidationError("; ".join(errors))

        options = options or TxOptions()
        log = structlog.get_logger(__name__).bind(tx=options.label)

        def transfer(q: Querier) -> TransferResult:
            with trace_span("create_transfer"):
                log.debug("create transfer")
                record = q.create_transfer(
                    request.from_account_id, request.to_account_id, request.amount
                )

            with trace_span("create_entry"):
                log.debug("create entry 1")
                from_entry = q.create_entry(request.from_account_id, -request.amount)

            with trace_span("create_entry"):
                log.debug("create entry 2")
                to_entry = q.create_entry(request.to_account_id, request.amount)

            updated = {}
            for account_id, delta in balance_update_order(
                request.from_account_id, request.to_account_id, request.amount
            ):
                with trace_span("update_balance") as span:
                    if span is not None:
                        span.annotate("account_id", account_id)
                    log.debug("get account", account_id=account_id)
                    account = q.get_account(account_id, for_update=True)
                    log.debug("update account", account_id=account_id, delta=delta)
                    updated[account_id] = q.update_account(account_id, account.balance + delta)

            return TransferResult(
                transfer=record,
                from_account=updated[request.from_account_id],
                to_account=updated[request.to_account_id],
                from_entry=from_entry,
                to_entry=to_entry,
            )

        result = self.execute(transfer, options)
        logger.info(
            "Transferred %d from account %d to account %d (transfer %d)",
            request.amount,
            request.from_account_id,
            request.to_account_id,
            result.transfer.id,
        )
        return result
