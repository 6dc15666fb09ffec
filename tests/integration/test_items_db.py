"""
Integration tests for the items queries.

These tests run against a real PostgreSQL instance, once per driver.

Run with: RUN_INTEGRATION_TESTS=1 pytest tests/integration/
"""

from __future__ import annotations

import asyncio
import os

import pytest

from inventory_queries.domain.models import Item
from inventory_queries.queries import items

pytestmark = pytest.mark.skipif(
    os.getenv("RUN_INTEGRATION_TESTS", "0") != "1",
    reason="Integration tests require RUN_INTEGRATION_TESTS=1 and reachable Postgres",
)


async def _create(store, name: str, price: str = "9.99", quantity: int = 10, description=None) -> Item:
    item = await items.create_item(
        store,
        items.CreateItemArgs(name=name, description=description, price=price, quantity=quantity),
    )
    assert item is not None
    return item


@pytest.mark.asyncio
async def test_create_then_get_round_trips_column_types(store):
    created = await _create(store, "Widget", price="12.50", quantity=3, description="blue")

    fetched = await items.get_item_by_id(store, items.GetItemByIDArgs(id=created.id))

    assert fetched == created
    assert isinstance(fetched.id, str)
    assert fetched.price == "12.50"
    assert fetched.quantity == 3
    assert fetched.description == "blue"


@pytest.mark.asyncio
async def test_get_missing_item_is_none(store):
    assert await items.get_item_by_id(store, items.GetItemByIDArgs(id="999999")) is None


@pytest.mark.asyncio
async def test_list_is_newest_first_and_paginated(store):
    first = await _create(store, "first")
    second = await _create(store, "second")
    third = await _create(store, "third")

    page_one = await items.list_items(store, items.ListItemsArgs(limit=2, offset=0))
    page_two = await items.list_items(store, items.ListItemsArgs(limit=2, offset=2))

    assert [i.id for i in page_one] == [third.id, second.id]
    assert [i.id for i in page_two] == [first.id]


@pytest.mark.asyncio
async def test_empty_table_lists_and_counts(store):
    assert await items.list_items(store, items.ListItemsArgs(limit=10, offset=0)) == []
    count = await items.count_items(store)
    assert count is not None and count.count == "0"


@pytest.mark.asyncio
async def test_count_is_text(store):
    for name in ("a", "b", "c"):
        await _create(store, name)

    count = await items.count_items(store)

    assert count is not None and count.count == "3"


@pytest.mark.asyncio
async def test_search_is_case_insensitive_substring(store):
    await _create(store, "Widget")
    await _create(store, "gadget")
    await _create(store, "Lamp")

    found = await items.search_items_by_name(
        store, items.SearchItemsByNameArgs(name="GET", limit=10, offset=0)
    )

    assert sorted(i.name for i in found) == ["Widget", "gadget"]
    assert found[0].name == "gadget"


@pytest.mark.asyncio
async def test_search_with_no_term_matches_nothing(store):
    await _create(store, "Widget")
    found = await items.search_items_by_name(
        store, items.SearchItemsByNameArgs(name=None, limit=10, offset=0)
    )
    assert found == []


@pytest.mark.asyncio
async def test_partial_update_keeps_unset_fields(store):
    before = await _create(store, "Widget", price="9.99", quantity=10, description="keep me")

    after = await items.update_item(
        store,
        items.UpdateItemArgs(id=before.id, name=None, description=None, price="7.50", quantity=None),
    )

    assert after is not None
    assert after.price == "7.50"
    assert after.name == before.name
    assert after.description == before.description
    assert after.quantity == before.quantity
    assert after.created_at == before.created_at


@pytest.mark.asyncio
async def test_update_with_none_does_not_clear_description(store):
    before = await _create(store, "Widget", description="sticky")

    after = await items.update_item(
        store,
        items.UpdateItemArgs(id=before.id, name="Renamed", description=None, price=None, quantity=None),
    )

    assert after is not None
    assert after.name == "Renamed"
    assert after.description == "sticky"


@pytest.mark.asyncio
async def test_update_missing_item_is_none(store):
    result = await items.update_item(
        store, items.UpdateItemArgs(id="999999", name="x", description=None, price=None, quantity=None)
    )
    assert result is None


@pytest.mark.asyncio
async def test_quantity_adjustment_is_relative(store):
    item = await _create(store, "Widget", quantity=10)

    adjusted = await items.update_item_quantity(store, items.UpdateItemQuantityArgs(id=item.id, delta=-3))

    assert adjusted is not None and adjusted.quantity == 7


@pytest.mark.asyncio
async def test_concurrent_adjustments_are_serialized_by_store(store):
    item = await _create(store, "Widget", quantity=10)

    await asyncio.gather(
        items.update_item_quantity(store, items.UpdateItemQuantityArgs(id=item.id, delta=-3)),
        items.update_item_quantity(store, items.UpdateItemQuantityArgs(id=item.id, delta=5)),
    )

    final = await items.get_item_by_id(store, items.GetItemByIDArgs(id=item.id))
    assert final is not None and final.quantity == 12


@pytest.mark.asyncio
async def test_delete_removes_item(store):
    item = await _create(store, "Widget")

    assert await items.delete_item(store, items.DeleteItemArgs(id=item.id)) is None
    assert await items.get_item_by_id(store, items.GetItemByIDArgs(id=item.id)) is None


@pytest.mark.asyncio
async def test_low_stock_is_ascending_and_strict(store):
    await _create(store, "plenty", quantity=50)
    await _create(store, "few", quantity=2)
    await _create(store, "none", quantity=0)
    await _create(store, "edge", quantity=5)

    low = await items.get_low_stock_items(store, items.GetLowStockItemsArgs(below=5))

    assert [i.name for i in low] == ["none", "few"]
