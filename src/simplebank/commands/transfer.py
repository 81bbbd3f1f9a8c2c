"""Command group: money transfers."""

from __future__ import annotations

from typing import TYPE_CHECKING

import click

from simplebank.config.models import ISOLATION_LEVELS
from simplebank.services.transfer import TransferService

if TYPE_CHECKING:
    from simplebank.commands._context import AppContext

_TRANSFER_EXAMPLES = """\
\b
Examples:
  simplebank transfer send 1 2 30
  simplebank transfer send 1 2 30 --label payroll --timeout 2.5
  simplebank transfer send 2 1 5 --isolation serializable --attempts 3
  simplebank transfer get 7
  simplebank transfer list 1 --limit 10"""


@click.group(epilog=_TRANSFER_EXAMPLES)
def transfer() -> None:
    """Move money between accounts and list past transfers."""


@transfer.command("send")
@click.argument("from_account_id", type=int)
@click.argument("to_account_id", type=int)
@click.argument("amount", type=int)
@click.option("--label", default=None, help="Name attached to this transfer's log events.")
@click.option(
    "--timeout",
    type=click.FloatRange(min=0, min_open=True),
    default=None,
    help="Abort the transaction after this many seconds.",
)
@click.option(
    "--isolation",
    "isolation_level",
    type=click.Choice(sorted(ISOLATION_LEVELS), case_sensitive=False),
    default=None,
    help="Override the configured isolation level.",
)
@click.option(
    "--attempts",
    "max_attempts",
    type=click.IntRange(min=1),
    default=None,
    help="Re-issue the transfer after a conflict, up to this many attempts.",
)
@click.pass_obj
def send_cmd(
    app: AppContext,
    from_account_id: int,
    to_account_id: int,
    amount: int,
    label: str | None,
    timeout: float | None,
    isolation_level: str | None,
    max_attempts: int | None,
) -> None:
    """Transfer AMOUNT from FROM_ACCOUNT_ID to TO_ACCOUNT_ID."""
    result = TransferService(app.store).transfer(
        from_account_id,
        to_account_id,
        amount,
        label=label,
        timeout=timeout,
        isolation_level=isolation_level,
        max_attempts=max_attempts,
    )
    app.emit(result)


@transfer.command("get")
@click.argument("transfer_id", type=int)
@click.pass_obj
def get_cmd(app: AppContext, transfer_id: int) -> None:
    """Show one transfer."""
    app.emit(TransferService(app.store).get(transfer_id))


@transfer.command("list")
@click.argument("account_id", type=int)
@click.option("--limit", type=click.IntRange(min=1), default=20, show_default=True)
@click.option("--offset", type=click.IntRange(min=0), default=0, show_default=True)
@click.pass_obj
def list_cmd(app: AppContext, account_id: int, limit: int, offset: int) -> None:
    """List transfers into or out of ACCOUNT_ID."""
    app.emit(TransferService(app.store).list_transfers(account_id, limit=limit, offset=offset))
