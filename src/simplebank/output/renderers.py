"""Operation-specific Rich renderers for ServiceResult.

Renderers are dispatched by ``result.op`` in :func:`render_result`.
Unknown ops fall through to a generic key-value renderer.
"""

from __future__ import annotations

from collections.abc import Callable
from typing import TYPE_CHECKING, Any

from rich.table import Table
from rich.text import Text

from simplebank.output.console import create_console, get_output, style_for_amount

if TYPE_CHECKING:
    from rich.console import Console

    from simplebank.services.result import ServiceResult


# ── Public API ────────────────────────────────────────────────────────


def render_result(result: ServiceResult, *, verbose: bool = False) -> str:
    """Render a ServiceResult to a styled string via Rich."""
    console = create_console()

    if result.ok:
        renderer = _OP_RENDERERS.get(result.op, _render_generic)
        renderer(result, console, verbose=verbose)
    else:
        _render_error(result, console, verbose=verbose)

    return get_output(console).rstrip("\n")


def render_quiet(result: ServiceResult) -> str:
    """Render minimal output for ``--quiet`` mode: ids only."""
    if not result.ok:
        msg = result.error.message if result.error else "Unknown error"
        return f"ERROR: {result.op} - {msg}"

    items = result.data.get("items")
    if isinstance(items, list):
        return "\n".join(str(item["id"]) for item in items if "id" in item)
    if result.op == "transfer":
        return str(result.data["transfer"]["id"])
    if "id" in result.data:
        return str(result.data["id"])
    return f"OK: {result.op}"


# ── Helpers ───────────────────────────────────────────────────────────


def _status_line(console: Console, result: ServiceResult) -> None:
    label = Text("OK", style="bank.ok")
    op = Text(f"  {result.op}", style="bank.op")
    console.print(label, op, end="")
    console.print()


def _field(console: Console, key: str, value: Any) -> None:
    """Print a single indented key-value field."""
    k = Text(f"  {key}: ", style="bank.key")
    if key == "id" or key.endswith("_id"):
        v = Text(str(value), style="bank.id")
    elif key == "amount" and isinstance(value, int):
        v = Text(str(value), style=style_for_amount(value))
    else:
        v = Text(str(value))
    console.print(Text.assemble(k, v))


def _render_meta(console: Console, result: ServiceResult) -> None:
    """Print meta block including telemetry span tree (verbose only)."""
    if not result.meta:
        return

    console.print()
    console.print(Text("  meta:", style="dim"))
    for k, v in result.meta.items():
        if k == "telemetry":
            _render_telemetry_tree(console, v, indent=4)
        else:
            console.print(f"    {k}: {v}")


def _render_telemetry_tree(console: Console, span_data: dict[str, Any], indent: int = 4) -> None:
    """Render a hierarchical span tree with color-coded timing."""
    prefix = " " * indent
    duration = span_data.get("duration_ms", 0.0)

    if duration > 1000:
        style = "bold red"
    elif duration > 100:
        style = "yellow"
    else:
        style = "dim"

    line = f"{prefix}[{style}]{duration:>8.2f}ms[/{style}]  {span_data.get('name', '?')}"
    annotations = span_data.get("annotations") or {}
    if annotations:
        line += "  (" + ", ".join(f"{k}={v}" for k, v in annotations.items()) + ")"
    console.print(line)

    for child in span_data.get("children", []):
        _render_telemetry_tree(console, child, indent=indent + 4)


# ── Error renderer ────────────────────────────────────────────────────


def _render_error(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    err = result.error
    msg = err.message if err else "Unknown error"
    label = Text("ERROR", style="bank.error")
    op = Text(f"  {result.op}", style="bank.op")
    code = Text(f" [{err.code}] " if err else " ", style="dim")
    console.print(Text.assemble(label, op, code, msg))

    if verbose and err and err.detail:
        console.print(Text("  detail:", style="dim"))
        for k, v in err.detail.items():
            console.print(Text(f"    {k}: {v}"))


# ── Renderers ─────────────────────────────────────────────────────────


def _render_generic(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    _status_line(console, result)
    for key, value in result.data.items():
        _field(console, key, value)
    if verbose:
        _render_meta(console, result)


def _render_transfer(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    """Render a completed transfer: the record, both entries, both balances."""
    _status_line(console, result)
    d = result.data
    transfer = d["transfer"]
    _field(console, "transfer_id", transfer["id"])
    _field(console, "from_account_id", transfer["from_account_id"])
    _field(console, "to_account_id", transfer["to_account_id"])
    _field(console, "amount", transfer["amount"])

    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("Account", style="bank.id", no_wrap=True)
    table.add_column("Entry", justify="right")
    table.add_column("Balance", justify="right")
    table.add_column("Currency")
    for side in ("from", "to"):
        account = d[f"{side}_account"]
        entry = d[f"{side}_entry"]
        table.add_row(
            str(account["id"]),
            Text(f"{entry['amount']:+d}", style=style_for_amount(entry["amount"])),
            str(account["balance"]),
            str(account["currency"]),
        )
    console.print(table)
    if verbose:
        _render_meta(console, result)


def _render_accounts(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="bank.id", no_wrap=True)
    table.add_column("Owner")
    table.add_column("Balance", justify="right")
    table.add_column("Currency")
    if verbose:
        table.add_column("Created", style="dim")
    for item in items:
        row = [str(item["id"]), item["owner"], str(item["balance"]), item["currency"]]
        if verbose:
            row.append(str(item["created_at"]))
        table.add_row(*row)
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} accounts")


def _render_entries(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    _field(console, "account_id", result.data.get("account_id"))
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="bank.id", no_wrap=True)
    table.add_column("Amount", justify="right")
    table.add_column("Created", style="dim")
    for item in items:
        table.add_row(
            str(item["id"]),
            Text(f"{item['amount']:+d}", style=style_for_amount(item["amount"])),
            str(item["created_at"]),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} entries")


def _render_transfers(result: ServiceResult, console: Console, *, verbose: bool = False) -> None:
    items = result.data.get("items", [])
    _field(console, "account_id", result.data.get("account_id"))
    table = Table(show_header=True, pad_edge=False, expand=False)
    table.add_column("ID", style="bank.id", no_wrap=True)
    table.add_column("From")
    table.add_column("To")
    table.add_column("Amount", justify="right")
    table.add_column("Created", style="dim")
    for item in items:
        table.add_row(
            str(item["id"]),
            str(item["from_account_id"]),
            str(item["to_account_id"]),
            str(item["amount"]),
            str(item["created_at"]),
        )
    console.print(table)
    console.print(f"\n{result.data.get('count', len(items))} transfers")


_OP_RENDERERS: dict[str, Callable[..., None]] = {
    "transfer": _render_transfer,
    "list_accounts": _render_accounts,
    "list_entries": _render_entries,
    "list_transfers": _render_transfers,
}
