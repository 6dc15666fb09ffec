"""
Queries against the `transactions` table.

Transactions are append-only: there is a create but no update or delete.
Counts and the per-user summary come back as exact text, never as native
numbers.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import List, Optional

from inventory_queries.domain.models import CountRow, Transaction, UserTransactionSummary
from inventory_queries.infrastructure.store import StoreClient
from inventory_queries.queries.abstract import Query, fetch_many, fetch_one

GET_TRANSACTION_BY_ID = Query.parse("""-- name: GetTransactionByID :one
SELECT id, user_id, item_id, transaction_type, quantity, amount, notes, created_at FROM transactions
WHERE id = $1
LIMIT 1""")

LIST_TRANSACTIONS = Query.parse("""-- name: ListTransactions :many
SELECT id, user_id, item_id, transaction_type, quantity, amount, notes, created_at FROM transactions
ORDER BY created_at DESC
LIMIT $1 OFFSET $2""")

LIST_TRANSACTIONS_BY_USER_ID = Query.parse("""-- name: ListTransactionsByUserID :many
SELECT id, user_id, item_id, transaction_type, quantity, amount, notes, created_at FROM transactions
WHERE user_id = $1
ORDER BY created_at DESC
LIMIT $2 OFFSET $3""")

LIST_TRANSACTIONS_BY_ITEM_ID = Query.parse("""-- name: ListTransactionsByItemID :many
SELECT id, user_id, item_id, transaction_type, quantity, amount, notes, created_at FROM transactions
WHERE item_id = $1
ORDER BY created_at DESC
LIMIT $2 OFFSET $3""")

COUNT_TRANSACTIONS = Query.parse("""-- name: CountTransactions :one
SELECT COUNT(*) FROM transactions""")

COUNT_TRANSACTIONS_BY_USER_ID = Query.parse("""-- name: CountTransactionsByUserID :one
SELECT COUNT(*) FROM transactions
WHERE user_id = $1""")

CREATE_TRANSACTION = Query.parse("""-- name: CreateTransaction :one
INSERT INTO transactions (
    user_id,
    item_id,
    transaction_type,
    quantity,
    amount,
    notes
) VALUES (
    $1, $2, $3, $4, $5, $6
) RETURNING id, user_id, item_id, transaction_type, quantity, amount, notes, created_at""")

GET_TRANSACTIONS_BY_DATE_RANGE = Query.parse("""-- name: GetTransactionsByDateRange :many
SELECT id, user_id, item_id, transaction_type, quantity, amount, notes, created_at FROM transactions
WHERE created_at >= $1 AND created_at <= $2
ORDER BY created_at DESC""")

GET_USER_TRANSACTION_SUMMARY = Query.parse("""-- name: GetUserTransactionSummary :one
SELECT
    user_id,
    COUNT(*) as total_transactions,
    SUM(amount) as total_amount,
    SUM(CASE WHEN transaction_type = 'purchase' THEN 1 ELSE 0 END) as purchase_count,
    SUM(CASE WHEN transaction_type = 'refund' THEN 1 ELSE 0 END) as refund_count
FROM transactions
WHERE user_id = $1
GROUP BY user_id""")


@dataclass(frozen=True)
class GetTransactionByIDArgs:
    id: str


@dataclass(frozen=True)
class ListTransactionsArgs:
    limit: int
    offset: int


@dataclass(frozen=True)
class ListTransactionsByUserIDArgs:
    user_id: str
    limit: int
    offset: int


@dataclass(frozen=True)
class ListTransactionsByItemIDArgs:
    item_id: str
    limit: int
    offset: int


@dataclass(frozen=True)
class CountTransactionsByUserIDArgs:
    user_id: str


@dataclass(frozen=True)
class CreateTransactionArgs:
    user_id: str
    item_id: str
    transaction_type: str
    quantity: int
    amount: str
    notes: Optional[str]


@dataclass(frozen=True)
class GetTransactionsByDateRangeArgs:
    # Both bounds inclusive.
    start: datetime
    end: datetime


@dataclass(frozen=True)
class GetUserTransactionSummaryArgs:
    user_id: str


async def get_transaction_by_id(
    store: StoreClient, args: GetTransactionByIDArgs
) -> Optional[Transaction]:
    return await fetch_one(store, GET_TRANSACTION_BY_ID, args, Transaction.from_row)


async def list_transactions(store: StoreClient, args: ListTransactionsArgs) -> List[Transaction]:
    return await fetch_many(store, LIST_TRANSACTIONS, args, Transaction.from_row)


async def list_transactions_by_user_id(
    store: StoreClient, args: ListTransactionsByUserIDArgs
) -> List[Transaction]:
    return await fetch_many(store, LIST_TRANSACTIONS_BY_USER_ID, args, Transaction.from_row)


async def list_transactions_by_item_id(
    store: StoreClient, args: ListTransactionsByItemIDArgs
) -> List[Transaction]:
    return await fetch_many(store, LIST_TRANSACTIONS_BY_ITEM_ID, args, Transaction.from_row)


async def count_transactions(store: StoreClient) -> Optional[CountRow]:
    return await fetch_one(store, COUNT_TRANSACTIONS, None, CountRow.from_row)


async def count_transactions_by_user_id(
    store: StoreClient, args: CountTransactionsByUserIDArgs
) -> Optional[CountRow]:
    return await fetch_one(store, COUNT_TRANSACTIONS_BY_USER_ID, args, CountRow.from_row)


async def create_transaction(
    store: StoreClient, args: CreateTransactionArgs
) -> Optional[Transaction]:
    return await fetch_one(store, CREATE_TRANSACTION, args, Transaction.from_row)


async def get_transactions_by_date_range(
    store: StoreClient, args: GetTransactionsByDateRangeArgs
) -> List[Transaction]:
    """Transactions created within [start, end], newest first. Not paginated."""
    return await fetch_many(store, GET_TRANSACTIONS_BY_DATE_RANGE, args, Transaction.from_row)


async def get_user_transaction_summary(
    store: StoreClient, args: GetUserTransactionSummaryArgs
) -> Optional[UserTransactionSummary]:
    """
    Totals for one user. A user without transactions yields no group and
    therefore None, not a zeroed summary.
    """
    return await fetch_one(
        store, GET_USER_TRANSACTION_SUMMARY, args, UserTransactionSummary.from_row
    )


__all__ = [
    "COUNT_TRANSACTIONS",
    "COUNT_TRANSACTIONS_BY_USER_ID",
    "CREATE_TRANSACTION",
    "GET_TRANSACTIONS_BY_DATE_RANGE",
    "GET_TRANSACTION_BY_ID",
    "GET_USER_TRANSACTION_SUMMARY",
    "LIST_TRANSACTIONS",
    "LIST_TRANSACTIONS_BY_ITEM_ID",
    "LIST_TRANSACTIONS_BY_USER_ID",
    "CountTransactionsByUserIDArgs",
    "CreateTransactionArgs",
    "GetTransactionByIDArgs",
    "GetTransactionsByDateRangeArgs",
    "GetUserTransactionSummaryArgs",
    "ListTransactionsArgs",
    "ListTransactionsByItemIDArgs",
    "ListTransactionsByUserIDArgs",
    "count_transactions",
    "count_transactions_by_user_id",
    "create_transaction",
    "get_transaction_by_id",
    "get_transactions_by_date_range",
    "get_user_transaction_summary",
    "list_transactions",
    "list_transactions_by_item_id",
    "list_transactions_by_user_id",
]
