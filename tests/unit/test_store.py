from __future__ import annotations

import logging
from types import SimpleNamespace
from typing import Any, List, Sequence

import psycopg
import pytest

from inventory_queries.infrastructure import store as store_module
from inventory_queries.infrastructure.store import (
    StoreClient,
    TracedStoreClient,
    configure_asyncpg_connection,
    configure_psycopg_connection,
)
from inventory_queries.queries import items
from tests.factories import FakeStore

LOGGER = "inventory_queries.infrastructure.store"


class _ScriptedStore(TracedStoreClient):
    driver = "scripted"

    def __init__(self, rows: List[tuple] | None = None, error: Exception | None = None, trace: bool = True) -> None:
        super().__init__(trace=trace)
        self._rows = rows or []
        self._error = error
        self.seen: List[tuple[str, tuple]] = []
        self.closed = False

    async def _fetch(self, sql: str, args: Sequence[Any]) -> List[tuple]:
        self.seen.append((sql, tuple(args)))
        if self._error is not None:
            raise self._error
        return self._rows

    async def _execute(self, sql: str, args: Sequence[Any]) -> None:
        self.seen.append((sql, tuple(args)))
        if self._error is not None:
            raise self._error

    async def close(self) -> None:
        self.closed = True


def test_store_clients_satisfy_protocol():
    assert isinstance(FakeStore(), StoreClient)
    assert isinstance(_ScriptedStore(), StoreClient)


def test_query_name_and_flatten_helpers():
    assert store_module._query_name(items.GET_ITEM_BY_ID.sql) == "GetItemByID"
    assert store_module._query_name("SELECT 1") == "<anonymous>"
    assert store_module._flatten(items.DELETE_ITEM.sql) == "DELETE FROM items WHERE id = $1"


@pytest.mark.asyncio
async def test_fetch_traces_at_debug_without_argument_values(caplog):
    client = _ScriptedStore(rows=[("1",)])

    with caplog.at_level(logging.DEBUG, logger=LOGGER):
        rows = await client.fetch(items.GET_ITEM_BY_ID.sql, ["secret-id"])

    assert rows == [("1",)]
    record = next(r for r in caplog.records if r.name == LOGGER)
    assert record.levelno == logging.DEBUG
    assert record.getMessage() == "query GetItemByID done"
    assert record.rows == 1
    assert record.arg_count == 1
    assert record.driver == "scripted"
    assert record.elapsed_ms >= 0
    assert "secret-id" not in caplog.text


@pytest.mark.asyncio
async def test_trace_can_be_disabled(caplog):
    client = _ScriptedStore(trace=False)

    with caplog.at_level(logging.DEBUG, logger=LOGGER):
        await client.execute(items.DELETE_ITEM.sql, ["1"])

    assert [r for r in caplog.records if r.name == LOGGER] == []


@pytest.mark.asyncio
async def test_failures_are_logged_and_reraised_unchanged(caplog):
    boom = psycopg.errors.UniqueViolation("duplicate key")
    client = _ScriptedStore(error=boom, trace=False)

    with caplog.at_level(logging.ERROR, logger=LOGGER):
        with pytest.raises(psycopg.errors.UniqueViolation) as excinfo:
            await client.fetch(items.CREATE_ITEM.sql, ["Widget", None, "1.00", 1])

    assert excinfo.value is boom
    assert "query CreateItem failed" in caplog.text


@pytest.mark.asyncio
async def test_configure_psycopg_connection_uses_raw_cursor_and_text_loaders():
    registered: list[tuple[str, type]] = []
    conn = SimpleNamespace(
        cursor_factory=None,
        adapters=SimpleNamespace(register_loader=lambda name, loader: registered.append((name, loader))),
    )

    await configure_psycopg_connection(conn)

    assert conn.cursor_factory is psycopg.AsyncRawCursor
    assert [name for name, _ in registered] == ["int8", "numeric", "uuid"]


@pytest.mark.asyncio
async def test_configure_asyncpg_connection_installs_text_codecs():
    calls: list[dict[str, Any]] = []

    class _Conn:
        async def set_type_codec(self, typename: str, **kwargs: Any) -> None:
            calls.append({"typename": typename, **kwargs})

    await configure_asyncpg_connection(_Conn())

    assert [c["typename"] for c in calls] == ["int8", "numeric", "uuid"]
    assert all(c["format"] == "text" and c["decoder"] is str for c in calls)
    assert all(c["schema"] == "pg_catalog" for c in calls)
