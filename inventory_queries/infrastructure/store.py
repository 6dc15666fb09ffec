"""
Store clients: the single collaborator the query modules talk to.

A store client executes one parameterized statement and hands back every row
as an ordered tuple of values. Statements use PostgreSQL's native positional
placeholders (`$1`, `$2`, ...) and are sent exactly as written.

Both concrete clients apply the same column coercion so the query modules see
identical values whichever driver is configured:

- `bigint`, `numeric` and `uuid` columns arrive as `str`
  (identifiers, money and aggregates stay exact);
- `integer` arrives as `int`, `timestamptz` as `datetime`, NULL as `None`.

Failures raised by the driver propagate unchanged. Nothing here retries a
statement.
"""

from __future__ import annotations

import abc
import time
from typing import Any, List, Optional, Protocol, Sequence, Tuple, runtime_checkable

import asyncpg
import psycopg
from psycopg.types.string import TextLoader
from psycopg_pool import AsyncConnectionPool

from inventory_queries.utils.logging import get_logger

log = get_logger(__name__)

Row = Tuple[Any, ...]

# Column types handed back as their text representation.
TEXT_ENCODED_TYPES = ("int8", "numeric", "uuid")


@runtime_checkable
class StoreClient(Protocol):
    """
    Capability required by the query modules.
    """

    async def fetch(self, sql: str, args: Sequence[Any]) -> List[Row]:
        """Run `sql` with `args` bound positionally and return all rows."""
        ...

    async def execute(self, sql: str, args: Sequence[Any]) -> None:
        """Run `sql` with `args` bound positionally, discarding any rows."""
        ...

    async def close(self) -> None:
        ...


def _query_name(sql: str) -> str:
    """Pull the name out of a `-- name: X :kind` header, if present."""
    first = sql.lstrip().split("\n", 1)[0]
    if first.startswith("-- name:"):
        return first[len("-- name:") :].split()[0]
    return "<anonymous>"


def _flatten(sql: str) -> str:
    return " ".join(line.strip() for line in sql.splitlines() if not line.lstrip().startswith("--"))


class TracedStoreClient(abc.ABC):
    """
    Base class for driver-backed clients.

    Subclasses implement `_fetch`/`_execute`; this class times every statement
    and logs it at DEBUG (or at ERROR when the driver raises, before
    re-raising the original exception). Argument values are never logged.
    """

    driver: str

    def __init__(self, trace: bool = True) -> None:
        self.trace = trace

    async def fetch(self, sql: str, args: Sequence[Any]) -> List[Row]:
        start = time.perf_counter()
        try:
            rows = await self._fetch(sql, args)
        except Exception:
            self._log_failure(sql, args, start)
            raise
        self._log_success(sql, args, start, len(rows))
        return rows

    async def execute(self, sql: str, args: Sequence[Any]) -> None:
        start = time.perf_counter()
        try:
            await self._execute(sql, args)
        except Exception:
            self._log_failure(sql, args, start)
            raise
        self._log_success(sql, args, start, None)

    @abc.abstractmethod
    async def _fetch(self, sql: str, args: Sequence[Any]) -> List[Row]:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def _execute(self, sql: str, args: Sequence[Any]) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    @abc.abstractmethod
    async def close(self) -> None:  # pragma: no cover - interface only
        raise NotImplementedError

    def _log_success(
        self, sql: str, args: Sequence[Any], start: float, rows: Optional[int]
    ) -> None:
        if not self.trace:
            return
        log.debug(
            "query %s done",
            _query_name(sql),
            extra={
                "driver": self.driver,
                "query": _flatten(sql),
                "arg_count": len(args),
                "rows": rows,
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 3),
            },
        )

    def _log_failure(self, sql: str, args: Sequence[Any], start: float) -> None:
        log.error(
            "query %s failed",
            _query_name(sql),
            exc_info=True,
            extra={
                "driver": self.driver,
                "arg_count": len(args),
                "elapsed_ms": round((time.perf_counter() - start) * 1000, 3),
            },
        )


async def configure_psycopg_connection(conn: psycopg.AsyncConnection) -> None:
    """
    Per-connection setup for the psycopg pool.

    Raw cursors keep `$n` placeholders intact; text loaders keep bigint,
    numeric and uuid columns as strings.
    """
    conn.cursor_factory = psycopg.AsyncRawCursor
    for type_name in TEXT_ENCODED_TYPES:
        conn.adapters.register_loader(type_name, TextLoader)


class PsycopgStore(TracedStoreClient):
    """
    Store client backed by a psycopg `AsyncConnectionPool`.

    Connections run in autocommit mode: every statement is its own
    transaction.
    """

    driver = "psycopg"

    def __init__(self, pool: AsyncConnectionPool, trace: bool = True) -> None:
        super().__init__(trace=trace)
        self._pool = pool

    @property
    def pool(self) -> AsyncConnectionPool:
        return self._pool

    async def _fetch(self, sql: str, args: Sequence[Any]) -> List[Row]:
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, list(args))
                if cur.description is None:
                    return []
                return list(await cur.fetchall())

    async def _execute(self, sql: str, args: Sequence[Any]) -> None:
        async with self._pool.connection() as conn:
            async with conn.cursor() as cur:
                await cur.execute(sql, list(args))

    async def close(self) -> None:
        await self._pool.close()


async def configure_asyncpg_connection(conn: asyncpg.Connection) -> None:
    """
    Per-connection setup for the asyncpg pool: text codecs for bigint,
    numeric and uuid so they round-trip as strings.
    """
    for type_name in TEXT_ENCODED_TYPES:
        await conn.set_type_codec(
            type_name,
            schema="pg_catalog",
            encoder=str,
            decoder=str,
            format="text",
        )


class AsyncpgStore(TracedStoreClient):
    """
    Store client backed by an `asyncpg` pool.
    """

    driver = "asyncpg"

    def __init__(self, pool: asyncpg.Pool, trace: bool = True) -> None:
        super().__init__(trace=trace)
        self._pool = pool

    @property
    def pool(self) -> asyncpg.Pool:
        return self._pool

    async def _fetch(self, sql: str, args: Sequence[Any]) -> List[Row]:
        async with self._pool.acquire() as conn:
            records = await conn.fetch(sql, *args)
        return [tuple(record) for record in records]

    async def _execute(self, sql: str, args: Sequence[Any]) -> None:
        async with self._pool.acquire() as conn:
            await conn.execute(sql, *args)

    async def close(self) -> None:
        await self._pool.close()


__all__ = [
    "AsyncpgStore",
    "PsycopgStore",
    "Row",
    "StoreClient",
    "TEXT_ENCODED_TYPES",
    "TracedStoreClient",
    "configure_asyncpg_connection",
    "configure_psycopg_connection",
]
