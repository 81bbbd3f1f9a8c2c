"""Ledger database: engine, schema, and single-statement queries via SQLAlchemy Core."""

from simplebank.infrastructure.database.engine import create_db_engine, init_database
from simplebank.infrastructure.database.queries import Querier, Queries
from simplebank.infrastructure.database.schema import accounts, entries, metadata, transfers

__all__ = [
    "Querier",
    "Queries",
    "accounts",
    "create_db_engine",
    "entries",
    "init_database",
    "metadata",
    "transfers",
]
