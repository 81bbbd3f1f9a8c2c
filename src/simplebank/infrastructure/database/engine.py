"""Database engine setup.

SQLAlchemy Core (not ORM) over any SQLAlchemy URL. PostgreSQL is the
production target; SQLite is the default for local ledgers and tests.

SQLite has no row locks, so every SQLite transaction starts with
``BEGIN IMMEDIATE`` and takes the database write lock up front. Concurrent
writers then queue on the busy timeout instead of failing when a read lock
cannot be upgraded. pysqlite's own implicit BEGIN is switched off so that
SQLAlchemy's ``begin`` event is the only place a transaction starts.
"""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any

from sqlalchemy import create_engine, event
from sqlalchemy.engine import Engine

from simplebank.infrastructure.database.schema import metadata

if TYPE_CHECKING:
    from sqlalchemy import Connection

    from simplebank.config.settings import BankSettings

logger = logging.getLogger(__name__)

# VM instructions between checks of the cancel predicate inside a statement.
_PROGRESS_INTERVAL = 1000


def create_db_engine(url: str, *, busy_timeout: float = 5.0, echo: bool = False) -> Engine:
    """Create an engine for *url*; SQLite gets WAL, foreign keys, and BEGIN IMMEDIATE."""
    if not url.startswith("sqlite"):
        return create_engine(url, echo=echo)

    engine = create_engine(
        url,
        echo=echo,
        connect_args={"timeout": busy_timeout, "check_same_thread": False},
    )

    @event.listens_for(engine, "connect")
    def _set_sqlite_pragma(dbapi_conn: Any, _: Any) -> None:
        dbapi_conn.isolation_level = None
        cursor = dbapi_conn.cursor()
        cursor.execute("PRAGMA journal_mode=WAL")
        cursor.execute("PRAGMA foreign_keys=ON")
        cursor.close()

    @event.listens_for(engine, "begin")
    def _begin_immediate(conn: Connection) -> None:
        conn.exec_driver_sql("BEGIN IMMEDIATE")

    return engine


def init_database(settings: BankSettings) -> Engine:
    """Create the engine described by *settings* and all ledger tables.

    For the default SQLite URL the ``{root}/.simplebank/`` directory is
    created first. Idempotent: safe to call on an existing database.
    """
    if settings.database.url is None:
        settings.data_dir.mkdir(parents=True, exist_ok=True)

    engine = create_db_engine(
        settings.database_url,
        busy_timeout=settings.database.busy_timeout,
        echo=settings.database.echo,
    )
    metadata.create_all(engine)
    logger.debug("Database ready at %s", engine.url.render_as_string(hide_password=True))
    return engine


@contextmanager
def interrupt_when(conn: Connection, expired: Callable[[], bool]) -> Iterator[None]:
    """Abort statements running on *conn* once *expired* returns True.

    SQLite polls a progress handler; the interrupted statement raises
    ``OperationalError("interrupted")``. Other dialects rely on the
    statement timeout set by :func:`set_statement_timeout`.
    """
    if conn.dialect.name != "sqlite":
        yield
        return

    dbapi_conn = conn.connection.dbapi_connection
    dbapi_conn.set_progress_handler(lambda: 1 if expired() else 0, _PROGRESS_INTERVAL)
    try:
        yield
    finally:
        dbapi_conn.set_progress_handler(None, 0)


@contextmanager
def lock_wait_limit(conn: Connection, seconds: float | None) -> Iterator[bool]:
    """Shorten SQLite's busy wait to *seconds* while the block runs.

    Yields True when the limit is below the connection's configured busy
    timeout, i.e. a lock wait inside the block ends at the caller's deadline
    rather than at ``busy_timeout``. The configured value is restored on exit.
    """
    if seconds is None or conn.dialect.name != "sqlite":
        yield False
        return

    cursor = conn.connection.dbapi_connection.cursor()
    try:
        configured = cursor.execute("PRAGMA busy_timeout").fetchone()[0]
        millis = max(0, int(seconds * 1000))
        if millis >= configured:
            yield False
            return
        cursor.execute(f"PRAGMA busy_timeout = {millis}")
        try:
            yield True
        finally:
            cursor.execute(f"PRAGMA busy_timeout = {configured}")
    finally:
        cursor.close()


def set_statement_timeout(conn: Connection, seconds: float) -> None:
    """Bound every statement of the current PostgreSQL transaction to *seconds*."""
    if conn.dialect.name != "postgresql":
        return
    millis = max(1, int(seconds * 1000))
    conn.exec_driver_sql(f"SET LOCAL statement_timeout = {millis}")
