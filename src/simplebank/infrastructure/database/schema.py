"""SQLAlchemy Core table definitions for the ledger database.

Three tables: accounts, entries, transfers. Entries and transfers reference
accounts, so an account with ledger history cannot be deleted.
"""

from __future__ import annotations

from datetime import UTC, datetime

from sqlalchemy import (
    BigInteger,
    CheckConstraint,
    Column,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    MetaData,
    Table,
    Text,
)

metadata = MetaData()

# BIGINT on PostgreSQL; plain INTEGER on SQLite so the column is a rowid alias.
_Id = BigInteger().with_variant(Integer(), "sqlite")


def _utcnow() -> datetime:
    return datetime.now(UTC)


accounts = Table(
    "accounts",
    metadata,
    Column("id", _Id, primary_key=True, autoincrement=True),
    Column("owner", Text, nullable=False),
    Column("balance", BigInteger, nullable=False),
    Column("currency", Text, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
)

entries = Table(
    "entries",
    metadata,
    Column("id", _Id, primary_key=True, autoincrement=True),
    Column("account_id", _Id, ForeignKey("accounts.id"), nullable=False),
    Column("amount", BigInteger, nullable=False),  # negative = debit
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
)

transfers = Table(
    "transfers",
    metadata,
    Column("id", _Id, primary_key=True, autoincrement=True),
    Column("from_account_id", _Id, ForeignKey("accounts.id"), nullable=False),
    Column("to_account_id", _Id, ForeignKey("accounts.id"), nullable=False),
    Column("amount", BigInteger, nullable=False),
    Column("created_at", DateTime(timezone=True), nullable=False, default=_utcnow),
    CheckConstraint("amount > 0", name="ck_transfers_amount_positive"),
)

# ---------------------------------------------------------------------------
# Indexes for frequently filtered columns
# ---------------------------------------------------------------------------

Index("ix_accounts_owner", accounts.c.owner)
Index("ix_entries_account_id", entries.c.account_id)
Index("ix_transfers_from_account_id", transfers.c.from_account_id)
Index("ix_transfers_to_account_id", transfers.c.to_account_id)
Index("ix_transfers_from_to", transfers.c.from_account_id, transfers.c.to_account_id)
