from __future__ import annotations

import asyncio
import enum
import json
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Any, Awaitable, Callable, Optional

import psycopg
import typer
from pydantic import BaseModel

from inventory_queries.config import get_settings
from inventory_queries.infrastructure.db_factory import build_dsn, open_store
from inventory_queries.infrastructure.store import StoreClient
from inventory_queries.queries import items, transactions, users
from inventory_queries.reporter import print_rows
from inventory_queries.utils.logging import configure_logging

DEFAULT_SCHEMA_PATH = Path(__file__).resolve().parent.parent / "db" / "init.sql"

app = typer.Typer(help="Inventory query layer CLI.")
items_app = typer.Typer(help="Read items.")
users_app = typer.Typer(help="Read users.")
transactions_app = typer.Typer(help="Read transactions.")
app.add_typer(items_app, name="items")
app.add_typer(users_app, name="users")
app.add_typer(transactions_app, name="transactions")


class Driver(str, enum.Enum):
    psycopg = "psycopg"
    asyncpg = "asyncpg"


@dataclass(frozen=True)
class CliOptions:
    """Global options for one invocation, carried on ``ctx.obj``."""

    driver: Optional[str] = None
    table: bool = False


def _options(ctx: typer.Context) -> CliOptions:
    return ctx.obj if isinstance(ctx.obj, CliOptions) else CliOptions()


def _dump(result: Any) -> str:
    if result is None:
        return "null"
    if isinstance(result, BaseModel):
        return result.model_dump_json(indent=2)
    return json.dumps([row.model_dump(mode="json") for row in result], indent=2)


def _run(ctx: typer.Context, query: Callable[[StoreClient], Awaitable[Any]]) -> None:
    """Open a store, run one query, print its result as JSON or a table."""
    options = _options(ctx)
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    async def _go() -> Any:
        async with open_store(settings, driver=options.driver) as store:
            return await query(store)

    result = asyncio.run(_go())
    if options.table:
        print_rows(result, title=ctx.command_path)
    else:
        typer.echo(_dump(result))


@app.callback()
def _main(
    ctx: typer.Context,
    driver: Optional[Driver] = typer.Option(
        None,
        "--driver",
        "-d",
        case_sensitive=False,
        help="Store driver override.",
    ),
    table: bool = typer.Option(False, "--table", help="Render results as a table instead of JSON."),
) -> None:
    ctx.obj = CliOptions(driver=driver.value if driver else None, table=table)


@app.command()
def info(ctx: typer.Context) -> None:
    """
    Show effective configuration values.
    """
    settings = get_settings()
    driver = _options(ctx).driver or settings.db_driver
    typer.echo(
        f"DB={settings.db_user}@{settings.db_host}:{settings.db_port}/{settings.db_name} | "
        f"driver={driver} pool=({settings.pool_min_size},{settings.pool_max_size}) "
        f"trace={settings.query_trace}"
    )


@app.command("init-schema")
def init_schema(
    path: Path = typer.Option(
        DEFAULT_SCHEMA_PATH,
        "--path",
        "-p",
        help="SQL file creating the items, transactions and users tables.",
    ),
) -> None:
    """
    Apply the schema file to the configured database.
    """
    if not path.exists():
        typer.echo(f"Schema file not found: {path}", err=True)
        raise typer.Exit(code=1)
    with psycopg.connect(build_dsn()) as conn:
        with conn.cursor() as cur:
            cur.execute(path.read_text(encoding="utf-8"))
        conn.commit()
    typer.echo(f"Applied {path}.")


@items_app.command("list")
def items_list(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-l"),
    offset: int = typer.Option(0, "--offset", "-o"),
) -> None:
    """Newest items first."""
    _run(ctx, lambda store: items.list_items(store, items.ListItemsArgs(limit=limit, offset=offset)))


@items_app.command("search")
def items_search(
    ctx: typer.Context,
    name: str = typer.Argument(..., help="Case-insensitive name substring."),
    limit: int = typer.Option(20, "--limit", "-l"),
    offset: int = typer.Option(0, "--offset", "-o"),
) -> None:
    _run(
        ctx,
        lambda store: items.search_items_by_name(
            store, items.SearchItemsByNameArgs(name=name, limit=limit, offset=offset)
        ),
    )


@items_app.command("low-stock")
def items_low_stock(
    ctx: typer.Context,
    below: int = typer.Option(5, "--below", "-b", help="Quantity threshold (exclusive)."),
) -> None:
    _run(ctx, lambda store: items.get_low_stock_items(store, items.GetLowStockItemsArgs(below=below)))


@users_app.command("get")
def users_get(
    ctx: typer.Context,
    user_id: Optional[str] = typer.Option(None, "--id"),
    public_id: Optional[str] = typer.Option(None, "--public-id"),
    email: Optional[str] = typer.Option(None, "--email"),
    username: Optional[str] = typer.Option(None, "--username"),
) -> None:
    """
    Look up one live user by exactly one key.
    """
    keys = [k for k in (user_id, public_id, email, username) if k is not None]
    if len(keys) != 1:
        typer.echo("Pass exactly one of --id, --public-id, --email, --username.", err=True)
        raise typer.Exit(code=2)

    if user_id is not None:
        _run(ctx, lambda store: users.get_user_by_id(store, users.GetUserByIDArgs(id=user_id)))
    elif public_id is not None:
        _run(
            ctx,
            lambda store: users.get_user_by_public_id(
                store, users.GetUserByPublicIDArgs(public_id=public_id)
            ),
        )
    elif email is not None:
        _run(ctx, lambda store: users.get_user_by_email(store, users.GetUserByEmailArgs(email=email)))
    else:
        _run(
            ctx,
            lambda store: users.get_user_by_username(
                store, users.GetUserByUsernameArgs(username=username)
            ),
        )


@users_app.command("list")
def users_list(
    ctx: typer.Context,
    limit: int = typer.Option(20, "--limit", "-l"),
    offset: int = typer.Option(0, "--offset", "-o"),
) -> None:
    _run(ctx, lambda store: users.list_users(store, users.ListUsersArgs(limit=limit, offset=offset)))


@transactions_app.command("summary")
def transactions_summary(
    ctx: typer.Context,
    user_id: str = typer.Argument(..., help="Internal user id."),
) -> None:
    """Purchase/refund totals for one user."""
    _run(
        ctx,
        lambda store: transactions.get_user_transaction_summary(
            store, transactions.GetUserTransactionSummaryArgs(user_id=user_id)
        ),
    )


def main() -> None:
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)


if __name__ == "__main__":
    main()
