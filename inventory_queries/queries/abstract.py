"""
Shared contract for every query module.

A statement is declared once as a `Query` whose literal SQL starts with a
header line of the form::

    -- name: GetItemByID :one

The header names the statement and fixes its result shape:

- ``:one``  -> `fetch_one`: the mapped record when the store returns exactly
  one row, otherwise ``None``. More than one row is *also* ``None``;
- ``:many`` -> `fetch_many`: a list in the statement's ORDER BY order, empty
  when nothing matches;
- ``:exec`` -> `execute`: nothing; failures raise.

Arguments are bound positionally in the order the caller passes them, one
value per ``$n`` placeholder (a count mismatch raises `TypeError`), and
rows are mapped positionally by the record's ``from_row``. Store failures are
never caught here.
"""

from __future__ import annotations

import enum
import re
from dataclasses import astuple, dataclass
from typing import Any, Callable, List, Optional, Sequence, TypeVar

from inventory_queries.infrastructure.store import StoreClient
from inventory_queries.utils.logging import get_logger

log = get_logger(__name__)

T = TypeVar("T")

RowMapper = Callable[[Sequence[Any]], T]

_HEADER_PREFIX = "-- name:"
_PLACEHOLDER = re.compile(r"\$(\d+)")


class Cardinality(str, enum.Enum):
    ONE = ":one"
    MANY = ":many"
    EXEC = ":exec"


@dataclass(frozen=True)
class Query:
    """
    A named, literal SQL statement and the result shape it produces.
    """

    name: str
    sql: str
    cardinality: Cardinality

    @classmethod
    def parse(cls, sql: str) -> "Query":
        """
        Build a Query from SQL carrying a ``-- name: <Name> <:kind>`` header.

        Raises
        ------
        ValueError
            If the header is missing or names an unknown result shape.
        """
        header = sql.split("\n", 1)[0].strip()
        if not header.startswith(_HEADER_PREFIX):
            raise ValueError(f"Query is missing a '{_HEADER_PREFIX}' header: {header!r}")
        parts = header[len(_HEADER_PREFIX) :].split()
        if len(parts) != 2:
            raise ValueError(f"Malformed query header: {header!r}")
        name, kind = parts
        try:
            cardinality = Cardinality(kind)
        except ValueError:
            raise ValueError(f"Unknown result shape {kind!r} in header of {name}") from None
        return cls(name=name, sql=sql, cardinality=cardinality)

    @property
    def placeholder_count(self) -> int:
        """Highest ``$n`` placeholder referenced by the statement."""
        return max((int(n) for n in _PLACEHOLDER.findall(self.sql)), default=0)


def bind(args: Any) -> tuple:
    """Positional parameters for an argument record, in field order."""
    if args is None:
        return ()
    return astuple(args)


def _params(query: Query, args: Any) -> tuple:
    params = bind(args)
    if len(params) != query.placeholder_count:
        raise TypeError(
            f"{query.name} takes {query.placeholder_count} argument(s), got {len(params)}"
        )
    return params


def _expect(query: Query, cardinality: Cardinality) -> None:
    if query.cardinality is not cardinality:
        raise TypeError(
            f"{query.name} is declared {query.cardinality.value}, "
            f"cannot run it as {cardinality.value}"
        )


async def fetch_one(
    store: StoreClient, query: Query, args: Any, mapper: RowMapper[T]
) -> Optional[T]:
    """
    Run a ``:one`` statement; return the mapped row or None.
    """
    _expect(query, Cardinality.ONE)
    rows = await store.fetch(query.sql, _params(query, args))
    if len(rows) != 1:
        if rows:
            log.warning(
                "%s returned %d rows; treating as not found",
                query.name,
                len(rows),
                extra={"query": query.name, "rows": len(rows)},
            )
        return None
    return mapper(rows[0])


async def fetch_many(
    store: StoreClient, query: Query, args: Any, mapper: RowMapper[T]
) -> List[T]:
    """
    Run a ``:many`` statement; return every mapped row in store order.
    """
    _expect(query, Cardinality.MANY)
    rows = await store.fetch(query.sql, _params(query, args))
    return [mapper(row) for row in rows]


async def execute(store: StoreClient, query: Query, args: Any) -> None:
    """
    Run an ``:exec`` statement.
    """
    _expect(query, Cardinality.EXEC)
    await store.execute(query.sql, _params(query, args))


__all__ = [
    "Cardinality",
    "Query",
    "RowMapper",
    "bind",
    "execute",
    "fetch_many",
    "fetch_one",
]
