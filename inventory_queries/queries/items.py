"""
Queries against the `items` table.

Every function runs exactly one statement. `update_item` is coalesce-style:
a ``None`` field keeps the stored value, it never clears it.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from inventory_queries.domain.models import CountRow, Item
from inventory_queries.infrastructure.store import StoreClient
from inventory_queries.queries.abstract import Query, execute, fetch_many, fetch_one

GET_ITEM_BY_ID = Query.parse("""-- name: GetItemByID :one
SELECT id, name, description, price, quantity, created_at, updated_at FROM items
WHERE id = $1
LIMIT 1""")

LIST_ITEMS = Query.parse("""-- name: ListItems :many
SELECT id, name, description, price, quantity, created_at, updated_at FROM items
ORDER BY created_at DESC
LIMIT $1 OFFSET $2""")

COUNT_ITEMS = Query.parse("""-- name: CountItems :one
SELECT COUNT(*) FROM items""")

SEARCH_ITEMS_BY_NAME = Query.parse("""-- name: SearchItemsByName :many
SELECT id, name, description, price, quantity, created_at, updated_at FROM items
WHERE name ILIKE '%' || $1 || '%'
ORDER BY created_at DESC
LIMIT $2 OFFSET $3""")

CREATE_ITEM = Query.parse("""-- name: CreateItem :one
INSERT INTO items (
    name,
    description,
    price,
    quantity
) VALUES (
    $1, $2, $3, $4
) RETURNING id, name, description, price, quantity, created_at, updated_at""")

UPDATE_ITEM = Query.parse("""-- name: UpdateItem :one
UPDATE items
SET
    name = COALESCE($2, name),
    description = COALESCE($3, description),
    price = COALESCE($4, price),
    quantity = COALESCE($5, quantity)
WHERE id = $1
RETURNING id, name, description, price, quantity, created_at, updated_at""")

UPDATE_ITEM_QUANTITY = Query.parse("""-- name: UpdateItemQuantity :one
UPDATE items
SET quantity = quantity + $2
WHERE id = $1
RETURNING id, name, description, price, quantity, created_at, updated_at""")

DELETE_ITEM = Query.parse("""-- name: DeleteItem :exec
DELETE FROM items
WHERE id = $1""")

GET_LOW_STOCK_ITEMS = Query.parse("""-- name: GetLowStockItems :many
SELECT id, name, description, price, quantity, created_at, updated_at FROM items
WHERE quantity < $1
ORDER BY quantity ASC""")


@dataclass(frozen=True)
class GetItemByIDArgs:
    id: str


@dataclass(frozen=True)
class ListItemsArgs:
    limit: int
    offset: int


@dataclass(frozen=True)
class SearchItemsByNameArgs:
    # Matched case-insensitively anywhere in the name. None matches nothing.
    name: Optional[str]
    limit: int
    offset: int


@dataclass(frozen=True)
class CreateItemArgs:
    name: str
    description: Optional[str]
    price: str
    quantity: int


@dataclass(frozen=True)
class UpdateItemArgs:
    id: str
    name: Optional[str]
    description: Optional[str]
    price: Optional[str]
    quantity: Optional[int]


@dataclass(frozen=True)
class UpdateItemQuantityArgs:
    id: str
    delta: int


@dataclass(frozen=True)
class DeleteItemArgs:
    id: str


@dataclass(frozen=True)
class GetLowStockItemsArgs:
    below: int


async def get_item_by_id(store: StoreClient, args: GetItemByIDArgs) -> Optional[Item]:
    return await fetch_one(store, GET_ITEM_BY_ID, args, Item.from_row)


async def list_items(store: StoreClient, args: ListItemsArgs) -> List[Item]:
    """Newest first."""
    return await fetch_many(store, LIST_ITEMS, args, Item.from_row)


async def count_items(store: StoreClient) -> Optional[CountRow]:
    return await fetch_one(store, COUNT_ITEMS, None, CountRow.from_row)


async def search_items_by_name(store: StoreClient, args: SearchItemsByNameArgs) -> List[Item]:
    """Case-insensitive substring match on name, newest first."""
    return await fetch_many(store, SEARCH_ITEMS_BY_NAME, args, Item.from_row)


async def create_item(store: StoreClient, args: CreateItemArgs) -> Optional[Item]:
    return await fetch_one(store, CREATE_ITEM, args, Item.from_row)


async def update_item(store: StoreClient, args: UpdateItemArgs) -> Optional[Item]:
    """
    Overwrite the non-None fields of an item. Passing None for a field keeps
    its current value; there is no way to clear `description` through here.
    """
    return await fetch_one(store, UPDATE_ITEM, args, Item.from_row)


async def update_item_quantity(store: StoreClient, args: UpdateItemQuantityArgs) -> Optional[Item]:
    """
    Add `delta` (may be negative) to the stored quantity. Not idempotent;
    concurrent adjustments are serialized by the store's row lock.
    """
    return await fetch_one(store, UPDATE_ITEM_QUANTITY, args, Item.from_row)


async def delete_item(store: StoreClient, args: DeleteItemArgs) -> None:
    await execute(store, DELETE_ITEM, args)


async def get_low_stock_items(store: StoreClient, args: GetLowStockItemsArgs) -> List[Item]:
    """Items with quantity strictly below `below`, lowest quantity first."""
    return await fetch_many(store, GET_LOW_STOCK_ITEMS, args, Item.from_row)


__all__ = [
    "COUNT_ITEMS",
    "CREATE_ITEM",
    "DELETE_ITEM",
    "GET_ITEM_BY_ID",
    "GET_LOW_STOCK_ITEMS",
    "LIST_ITEMS",
    "SEARCH_ITEMS_BY_NAME",
    "UPDATE_ITEM",
    "UPDATE_ITEM_QUANTITY",
    "CreateItemArgs",
    "DeleteItemArgs",
    "GetItemByIDArgs",
    "GetLowStockItemsArgs",
    "ListItemsArgs",
    "SearchItemsByNameArgs",
    "UpdateItemArgs",
    "UpdateItemQuantityArgs",
    "count_items",
    "create_item",
    "delete_item",
    "get_item_by_id",
    "get_low_stock_items",
    "list_items",
    "search_items_by_name",
    "update_item",
    "update_item_quantity",
]
