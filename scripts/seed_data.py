"""
Seed script for the inventory store.

Builds a deterministic pseudo-random plan of users, items and purchase/refund
transactions, then loads it through the query functions themselves so the
seeded rows go through exactly the statements the application uses.
"""

from __future__ import annotations

import asyncio
import random
import sys
import time
from dataclasses import dataclass, field
from decimal import Decimal

import typer

from inventory_queries.config import get_settings
from inventory_queries.infrastructure.db_factory import open_store
from inventory_queries.infrastructure.store import StoreClient
from inventory_queries.queries import items, transactions, users
from inventory_queries.utils.logging import configure_logging, get_logger

log = get_logger(__name__)

app = typer.Typer(help="Seed the items, users and transactions tables.")

_ADJECTIVES = ["red", "blue", "steel", "mini", "pro", "eco", "smart", "quiet"]
_NOUNS = ["widget", "gadget", "sprocket", "lamp", "kettle", "drill", "fan", "router"]


@dataclass(frozen=True)
class PlannedTransaction:
    user_index: int
    item_index: int
    transaction_type: str
    quantity: int
    amount: str


@dataclass
class SeedPlan:
    users: list[users.CreateUserArgs] = field(default_factory=list)
    items: list[items.CreateItemArgs] = field(default_factory=list)
    transactions: list[PlannedTransaction] = field(default_factory=list)


def _build_plan(user_count: int, item_count: int, transaction_count: int, seed: int) -> SeedPlan:
    rng = random.Random(seed)
    plan = SeedPlan()

    for i in range(user_count):
        username = f"user{i:05d}"
        plan.users.append(
            users.CreateUserArgs(
                email=f"{username}@example.com",
                username=username,
                display_name=f"User {i}" if rng.random() < 0.8 else None,
            )
        )

    prices: list[Decimal] = []
    for i in range(item_count):
        price = Decimal(rng.randint(100, 50_000)) / 100
        prices.append(price)
        name = f"{rng.choice(_ADJECTIVES).title()} {rng.choice(_NOUNS).title()} {i}"
        plan.items.append(
            items.CreateItemArgs(
                name=name,
                description=None if rng.random() < 0.3 else f"Seeded {name.lower()}",
                price=f"{price:.2f}",
                quantity=rng.randint(0, 200),
            )
        )

    if not plan.users or not plan.items:
        return plan

    for _ in range(transaction_count):
        item_index = rng.randrange(len(plan.items))
        quantity = rng.randint(1, 5)
        plan.transactions.append(
            PlannedTransaction(
                user_index=rng.randrange(len(plan.users)),
                item_index=item_index,
                transaction_type="refund" if rng.random() < 0.1 else "purchase",
                quantity=quantity,
                amount=f"{prices[item_index] * quantity:.2f}",
            )
        )
    return plan


async def _load_plan(store: StoreClient, plan: SeedPlan) -> dict[str, int]:
    """
    Insert the plan row by row. Purchases take stock away from the item and
    refunds put it back, through the relative quantity update.
    """
    user_ids: list[str] = []
    for args in plan.users:
        user = await users.create_user(store, args)
        if user is None:
            raise RuntimeError(f"CreateUser returned no row for {args.username}")
        user_ids.append(user.id)

    item_ids: list[str] = []
    for args in plan.items:
        item = await items.create_item(store, args)
        if item is None:
            raise RuntimeError(f"CreateItem returned no row for {args.name}")
        item_ids.append(item.id)

    for planned in plan.transactions:
        item_id = item_ids[planned.item_index]
        await transactions.create_transaction(
            store,
            transactions.CreateTransactionArgs(
                user_id=user_ids[planned.user_index],
                item_id=item_id,
                transaction_type=planned.transaction_type,
                quantity=planned.quantity,
                amount=planned.amount,
                notes=None,
            ),
        )
        delta = -planned.quantity if planned.transaction_type == "purchase" else planned.quantity
        await items.update_item_quantity(store, items.UpdateItemQuantityArgs(id=item_id, delta=delta))

    return {
        "users": len(user_ids),
        "items": len(item_ids),
        "transactions": len(plan.transactions),
    }


async def _seed(plan: SeedPlan, driver: str | None, dsn: str | None) -> dict[str, int]:
    async with open_store(get_settings(), driver=driver, dsn_override=dsn) as store:
        return await _load_plan(store, plan)


@app.command()
def main(
    user_count: int = typer.Option(50, "--users", "-u", help="Number of users to create."),
    item_count: int = typer.Option(100, "--items", "-i", help="Number of items to create."),
    transaction_count: int = typer.Option(
        500, "--transactions", "-t", help="Number of transactions to create."
    ),
    seed: int = typer.Option(42, "--seed", help="Deterministic RNG seed."),
    driver: str | None = typer.Option(None, "--driver", "-d", help="psycopg or asyncpg."),
    dsn: str | None = typer.Option(None, "--dsn", help="Optional DSN override for Postgres."),
    dry_run: bool = typer.Option(
        False, "--dry-run", help="Only build and summarize the plan; skip the database."
    ),
) -> None:
    """
    Generate a deterministic seed plan and load it through the query layer.
    """
    settings = get_settings()
    configure_logging(level=settings.log_level, json_logs=settings.log_json)

    start = time.perf_counter()
    plan = _build_plan(user_count, item_count, transaction_count, seed)
    typer.echo(
        f"Planned {len(plan.users):,} users, {len(plan.items):,} items, "
        f"{len(plan.transactions):,} transactions (seed={seed})"
    )

    if dry_run:
        typer.echo("Skipping load (dry-run flag set).")
        return

    counts = asyncio.run(_seed(plan, driver, dsn))
    duration = time.perf_counter() - start
    log.info("seed complete", extra=counts)
    typer.echo(f"Seed completed in {duration:.2f}s: {counts}")


if __name__ == "__main__":
    try:
        app()
    except KeyboardInterrupt:
        typer.echo("Cancelled by user.", err=True)
        sys.exit(130)
