"""
Domain package for the inventory query layer.

Exports the row records produced by the query modules. Keep this package
focused on data definitions; no I/O happens here.
"""

from inventory_queries.domain.models import (
    CountRow,
    Item,
    Transaction,
    User,
    UserTransactionSummary,
)

__all__ = [
    "CountRow",
    "Item",
    "Transaction",
    "User",
    "UserTransactionSummary",
]
