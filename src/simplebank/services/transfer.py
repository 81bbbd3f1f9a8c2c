"""TransferService: money transfers and transfer history.

Wraps :meth:`Store.transfer_tx` with the configured deadline, isolation
level, and caller-side retry. A transfer is re-issued only after a
``CONFLICT`` error and only while attempts remain; ``max_attempts``
defaults to 1, so nothing is retried unless configured.
"""

from __future__ import annotations

import logging
import threading

from simplebank.domain.errors import BankError, ValidationError
from simplebank.domain.models import TransferRequest
from simplebank.infrastructure.store import TxOptions
from simplebank.services._helpers import check_page
from simplebank.services.base import BaseService, traced
from simplebank.services.result import ServiceResult

logger = logging.getLogger(__name__)


class TransferService(BaseService):
    """Send money between accounts and read back transfer records."""

    @traced
    def transfer(
        self,
        from_account_id: int,
        to_account_id: int,
        amount: int,
        *,
        label: str | None = None,
        timeout: float | None = None,
        isolation_level: str | None = None,
        max_attempts: int | None = None,
        cancel: threading.Event | None = None,
    ) -> ServiceResult:
        """Transfer *amount* between two accounts as one transaction.

        *timeout* and *max_attempts* fall back to the ``[transfer]`` config
        section. Each attempt gets the full *timeout*.
        """
        op = "transfer"
        config = self._store.settings.transfer
        attempts_allowed = max_attempts if max_attempts is not None else config.max_attempts
        if attempts_allowed < 1:
            return self._failure(
                op, ValidationError(f"max_attempts must be at least 1, got {attempts_allowed}")
            )

        request = TransferRequest(
            from_account_id=from_account_id,
            to_account_id=to_account_id,
            amount=amount,
        )
        options = TxOptions(
            isolation_level=isolation_level,
            timeout=timeout if timeout is not None else config.timeout,
            cancel=cancel,
            label=label,
        )

        attempt = 0
        while True:
            attempt += 1
            try:
                result = self._store.transfer_tx(request, options)
            except BankError as exc:
                if exc.retryable and attempt < attempts_allowed:
                    logger.warning(
                        "Transfer %s conflicted (attempt %d/%d), retrying: %s",
                        label or "",
                        attempt,
                        attempts_allowed,
                        exc,
                    )
                    continue
                return self._failure(op, exc, meta={"attempts": attempt})
            break

        return ServiceResult(
            ok=True,
            op=op,
            data=result.model_dump(mode="json"),
            meta={"attempts": attempt},
        )

    @traced
    def get(self, transfer_id: int) -> ServiceResult:
        op = "get_transfer"
        try:
            record = self._store.queries.get_transfer(transfer_id)
        except BankError as exc:
            return self._failure(op, exc)
        return ServiceResult(ok=True, op=op, data=record.model_dump(mode="json"))

    @traced
    def list_transfers(
        self, account_id: int, *, limit: int = 20, offset: int = 0
    ) -> ServiceResult:
        """List transfers into or out of *account_id*, oldest first."""
        op = "list_transfers"
        try:
            check_page(limit, offset)
            self._store.queries.get_account(account_id)
            items = self._store.queries.list_transfers(account_id, limit=limit, offset=offset)
        except BankError as exc:
            return self._failure(op, exc)
        return ServiceResult(
            ok=True,
            op=op,
            data={
                "account_id": account_id,
                "items": [t.model_dump(mode="json") for t in items],
                "count": len(items),
            },
        )
