"""Shared pytest fixtures for simplebank tests."""

from __future__ import annotations

import logging
from collections.abc import Callable, Iterator
from pathlib import Path

import pytest
from click.testing import CliRunner
from sqlalchemy.engine import Engine

from simplebank.config.settings import BankSettings
from simplebank.domain.models import Account
from simplebank.infrastructure.database.engine import init_database
from simplebank.infrastructure.store import Store
from simplebank.telemetry import disable_telemetry


@pytest.fixture(autouse=True)
def _clean_env(monkeypatch: pytest.MonkeyPatch) -> Iterator[None]:
    """Keep host SIMPLEBANK_* variables and telemetry state out of tests."""
    monkeypatch.delenv("SIMPLEBANK_CONFIG", raising=False)
    monkeypatch.delenv("SIMPLEBANK_DATABASE__URL", raising=False)
    monkeypatch.delenv("SIMPLEBANK_DATABASE__ISOLATION_LEVEL", raising=False)
    monkeypatch.delenv("SIMPLEBANK_TRANSFER__MAX_ATTEMPTS", raising=False)
    monkeypatch.delenv("SIMPLEBANK_TRANSFER__TIMEOUT", raising=False)
    root = logging.getLogger()
    handlers, level = root.handlers[:], root.level
    bank_level = logging.getLogger("simplebank").level
    yield
    disable_telemetry()
    # CLI invocations point the root handler at a stream that is gone afterwards.
    root.handlers = handlers
    root.setLevel(level)
    logging.getLogger("simplebank").setLevel(bank_level)


@pytest.fixture
def cli_runner() -> CliRunner:
    """Provide a Click CLI test runner."""
    return CliRunner()


@pytest.fixture
def settings(tmp_path: Path) -> BankSettings:
    """Default settings rooted at a temp directory (SQLite file database)."""
    return BankSettings.from_cli(root=tmp_path)


@pytest.fixture
def db_engine(settings: BankSettings) -> Iterator[Engine]:
    """Initialized SQLite engine with all tables created."""
    engine = init_database(settings)
    try:
        yield engine
    finally:
        engine.dispose()


@pytest.fixture
def store(settings: BankSettings) -> Iterator[Store]:
    """A ready-to-use store on a fresh database."""
    s = Store(settings)
    try:
        yield s
    finally:
        s.close()


@pytest.fixture
def open_account(store: Store) -> Callable[..., Account]:
    """Factory: ``open_account("alice", 100)`` creates and returns an account."""

    def _open(owner: str, balance: int = 0, currency: str = "USD") -> Account:
        return store.queries.create_account(owner, currency, balance)

    return _open


@pytest.fixture
def _isolated_root(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    """Change CWD to a temp directory so the CLI creates an isolated database.

    Use via ``@pytest.mark.usefixtures("_isolated_root")`` on command test
    classes.
    """
    monkeypatch.chdir(tmp_path)
