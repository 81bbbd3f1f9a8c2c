"""Lock ordering for the two balance updates of a transfer.

Concurrent transfers over the same pair of accounts must lock the two
account rows in one global order, whatever their direction. The lower
account id is always updated first.
"""

from __future__ import annotations

from typing import NamedTuple


class BalanceUpdate(NamedTuple):
    """One pending balance change: add *delta* to *account_id*."""

    account_id: int
    delta: int


def balance_update_order(
    from_account_id: int, to_account_id: int, amount: int
) -> tuple[BalanceUpdate, BalanceUpdate]:
    """Return the debit and credit updates for a transfer, in lock order."""
    debit = BalanceUpdate(from_account_id, -amount)
    credit = BalanceUpdate(to_account_id, amount)
    if from_account_id < to_account_id:
        return debit, credit
    return credit, debit
