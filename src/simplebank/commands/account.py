"""Command group: accounts and their ledger entries."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from simplebank.services.accounts import AccountService

if TYPE_CHECKING:
    from simplebank.commands._context import AppContext

_ACCOUNT_EXAMPLES = """\
\b
Examples:
  simplebank account create alice --currency EUR --balance 100
  simplebank account get 1
  simplebank account list --limit 50
  simplebank account entries 1
  simplebank --json account delete 3"""


@click.group(epilog=_ACCOUNT_EXAMPLES)
def account() -> None:
    """Create, inspect, and delete ledger accounts."""


@account.command("create")
@click.argument("owner")
@click.option("--currency", default="USD", show_default=True, help="3-letter currency code.")
@click.option("--balance", type=int, default=0, show_default=True, help="Opening balance.")
@click.pass_obj
def create_cmd(app: AppContext, owner: str, currency: str, balance: int) -> None:
    """Open a new account for OWNER."""
    app.emit(AccountService(app.store).create(owner, currency=currency, balance=balance))


@account.command("get")
@click.argument("account_id", type=int)
@click.pass_obj
def get_cmd(app: AppContext, account_id: int) -> None:
    """Show one account."""
    app.emit(AccountService(app.store).get(account_id))


@account.command("list")
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True)
@click.option("--offset", type=click.IntRange(min=0), default=0, show_default=True)
@click.pass_obj
def list_cmd(app: AppContext, limit: int, offset: int) -> None:
    """List accounts by id."""
    app.emit(AccountService(app.store).list_accounts(limit=limit, offset=offset))


@account.command("delete")
@click.argument("account_id", type=int)
@click.pass_obj
def delete_cmd(app: AppContext, account_id: int) -> None:
    """Delete an account that has no entries or transfers."""
    app.emit(AccountService(app.store).delete(account_id))


@account.command("entries")
@click.argument("account_id", type=int)
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True)
@click.option("--offset", type=click.IntRange(min=0), default=0, show_default=True)
@click.pass_obj
def entries_cmd(app: AppContext, account_id: int, limit: int, offset: int) -> None:
    """List the ledger entries of an account."""
    app.emit(AccountService(app.store).entries(account_id, limit=limit, offset=offset))
