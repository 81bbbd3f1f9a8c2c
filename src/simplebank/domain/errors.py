"""Error taxonomy for ledger operations.

Every error carries a stable ``code`` that the service layer copies into
:class:`~simplebank.services.result.ServiceError`. Only :class:`ConflictError`
is safe to retry, and only by re-issuing the whole operation.
"""

from __future__ import annotations


class BankError(Exception):
    """Base class for all simplebank errors."""

    code = "BANK_ERROR"
    retryable = False


class ValidationError(BankError):
    """The request is malformed or breaks a business rule."""

    code = "VALIDATION_FAILED"


class NotFoundError(BankError):
    """A referenced account, entry, or transfer does not exist."""

    code = "NOT_FOUND"


class ConflictError(BankError):
    """The store aborted the transaction (deadlock, serialization, lock timeout)."""

    code = "CONFLICT"
    retryable = True


class TransactionCancelled(BankError):
    """The caller's deadline passed or its cancel signal was set."""

    code = "CANCELLED"


class StoreError(BankError):
    """Any other failure reported by the database."""

    code = "STORE_ERROR"


class CommitError(BankError):
    """Commit failed. The outcome is unknown and must be treated as failed."""

    code = "COMMIT_FAILED"


class RollbackError(BankError):
    """The unit of work failed and so did the rollback that followed.

    Both causes stay reachable: ``error`` is the original failure and
    ``rollback_error`` the failure raised while rolling back.
    """

    code = "ROLLBACK_FAILED"

    def __init__(self, error: BaseException, rollback_error: BaseException) -> None:
        super().__init__(f"tx err: {error}, rb err: {rollback_error}")
        self.error = error
        self.rollback_error = rollback_error
