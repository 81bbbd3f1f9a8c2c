"""Ledger records and transfer request/result types.

INVARIANT: Entries and transfers are immutable once created. Accounts change
only through a balance update; a transfer never deletes an account.
"""

from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel


class Account(BaseModel):
    """A ledger account. ``balance`` is in integer currency units."""

    model_config = {"frozen": True, "from_attributes": True}

    id: int
    owner: str
    balance: int
    currency: str
    created_at: datetime


class Entry(BaseModel):
    """A single balance change on one account (negative amount is a debit)."""

    model_config = {"frozen": True, "from_attributes": True}

    id: int
    account_id: int
    amount: int
    created_at: datetime


class Transfer(BaseModel):
    """A record of money moving from one account to another."""

    model_config = {"frozen": True, "from_attributes": True}

    id: int
    from_account_id: int
    to_account_id: int
    amount: int
    created_at: datetime


class TransferRequest(BaseModel):
    """Input to a money transfer. Checked by :func:`validate_transfer`."""

    model_config = {"frozen": True}

    from_account_id: int
    to_account_id: int
    amount: int


class TransferResult(BaseModel):
    """Everything a committed transfer produced.

    Attributes:
        transfer: The created transfer record.
        from_account: Source account after its balance was updated.
        to_account: Destination account after its balance was updated.
        from_entry: The debit entry on the source account.
        to_entry: The credit entry on the destination account.
    """

    model_config = {"frozen": True}

    transfer: Transfer
    from_account: Account
    to_account: Account
    from_entry: Entry
    to_entry: Entry


def validate_transfer(request: TransferRequest) -> list[str]:
    """Return the business-rule violations of *request* (empty when valid)."""
    errors: list[str] = []
    if request.amount <= 0:
        errors.append(f"Transfer amount must be positive, got {request.amount}")
    if request.from_account_id == request.to_account_id:
        errors.append(f"Cannot transfer from account {request.from_account_id} to itself")
    return errors
