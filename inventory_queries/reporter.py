from __future__ import annotations

from typing import Optional, Sequence

from pydantic import BaseModel
from rich import box
from rich.console import Console
from rich.table import Table

_NUMERIC_FIELDS = {
    "id",
    "user_id",
    "item_id",
    "price",
    "quantity",
    "amount",
    "count",
    "total_transactions",
    "total_amount",
    "purchase_count",
    "refund_count",
}


def _cell(value: object) -> str:
    if value is None:
        return "[dim]null[/dim]"
    return str(value)


def print_rows(
    rows: Sequence[BaseModel] | BaseModel | None,
    title: str,
    console: Optional[Console] = None,
) -> None:
    """
    Render query results as a rich table.

    Accepts a single record (``:one``), a list of records (``:many``) or
    ``None``. Columns follow the model's field order; numeric columns are
    right-aligned.
    """
    console = console or Console()

    if rows is None:
        console.print("[yellow]Not found.[/yellow]")
        return
    if isinstance(rows, BaseModel):
        rows = [rows]
    if not rows:
        console.print("[yellow]No rows.[/yellow]")
        return

    columns = list(type(rows[0]).model_fields)
    table = Table(title=title, box=box.ROUNDED, caption=f"{len(rows):,} row(s)")
    for name in columns:
        if name in _NUMERIC_FIELDS:
            table.add_column(name, justify="right", style="magenta")
        elif name == "name" or name == "username":
            table.add_column(name, style="cyan", no_wrap=True)
        else:
            table.add_column(name)

    for row in rows:
        table.add_row(*(_cell(getattr(row, name)) for name in columns))

    console.print(table)
