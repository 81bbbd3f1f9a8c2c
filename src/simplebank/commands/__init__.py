"""Subcommand modules for simplebank.

Provides register_commands() which uses deferred imports to keep
``simplebank --help`` fast.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    import click


def register_commands(cli: click.Group) -> None:
    """Register all command groups on the root CLI group."""
    from simplebank.commands.account import account
    from simplebank.commands.transfer import transfer

    cli.add_command(account)
    cli.add_command(transfer)
