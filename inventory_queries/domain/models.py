"""
Row records for the inventory query layer.

Each record mirrors the column list of the statements that produce it and is
built from a raw row strictly by position (`from_row`). Reordering a SELECT or
RETURNING list therefore requires the matching `from_row` to change with it.

Identifiers, money and aggregate counts stay text-encoded exactly as the store
client hands them over; only `quantity` is a native integer.
"""
from __future__ import annotations

from datetime import datetime
from typing import Any, Optional, Sequence

from pydantic import BaseModel, Field

_FROZEN = {
    "frozen": True,
    "populate_by_name": True,
    "arbitrary_types_allowed": False,
}


class Item(BaseModel):
    """
    Projection of the `items` table:
    id, name, description, price, quantity, created_at, updated_at.
    """

    id: str = Field(..., description="Primary key (BIGSERIAL) as text.")
    name: str
    description: Optional[str] = Field(..., description="Free text, nullable.")
    price: str = Field(..., description="NUMERIC(12,2) as its canonical text form.")
    quantity: int
    created_at: datetime
    updated_at: datetime

    model_config = _FROZEN

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Item":
        return cls(
            id=row[0],
            name=row[1],
            description=row[2],
            price=row[3],
            quantity=row[4],
            created_at=row[5],
            updated_at=row[6],
        )


class Transaction(BaseModel):
    """
    Projection of the `transactions` table:
    id, user_id, item_id, transaction_type, quantity, amount, notes, created_at.

    Transactions are append-only; there is no update or delete statement.
    """

    id: str
    user_id: str
    item_id: str
    transaction_type: str = Field(..., description="'purchase' or 'refund'.")
    quantity: int
    amount: str = Field(..., description="NUMERIC(12,2) as text.")
    notes: Optional[str]
    created_at: datetime

    model_config = _FROZEN

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "Transaction":
        return cls(
            id=row[0],
            user_id=row[1],
            item_id=row[2],
            transaction_type=row[3],
            quantity=row[4],
            amount=row[5],
            notes=row[6],
            created_at=row[7],
        )


class User(BaseModel):
    """
    Projection of the `users` table:
    id, public_id, email, username, display_name, created_at, updated_at, deleted_at.
    """

    id: str
    public_id: str = Field(..., description="External UUID as text.")
    email: str
    username: str
    display_name: Optional[str]
    created_at: datetime
    updated_at: datetime
    deleted_at: Optional[datetime] = Field(..., description="Set once soft-deleted.")

    model_config = _FROZEN

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "User":
        return cls(
            id=row[0],
            public_id=row[1],
            email=row[2],
            username=row[3],
            display_name=row[4],
            created_at=row[5],
            updated_at=row[6],
            deleted_at=row[7],
        )


class CountRow(BaseModel):
    """Single `COUNT(*)` column, kept as text to avoid precision loss."""

    count: str

    model_config = _FROZEN

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "CountRow":
        return cls(count=row[0])


class UserTransactionSummary(BaseModel):
    """Per-user aggregate over `transactions`; every aggregate is exact text."""

    user_id: str
    total_transactions: str
    total_amount: str
    purchase_count: str
    refund_count: str

    model_config = _FROZEN

    @classmethod
    def from_row(cls, row: Sequence[Any]) -> "UserTransactionSummary":
        return cls(
            user_id=row[0],
            total_transactions=row[1],
            total_amount=row[2],
            purchase_count=row[3],
            refund_count=row[4],
        )


__all__ = ["CountRow", "Item", "Transaction", "User", "UserTransactionSummary"]
