"""
Query modules for the inventory store.

`items`, `transactions` and `users` are independent of each other; each one
declares its literal statements and thin async functions on top of the shared
contract in `abstract`. Import the entity modules directly:

    from inventory_queries.queries import items
    item = await items.get_item_by_id(store, items.GetItemByIDArgs(id="1"))
"""

from inventory_queries.queries import items, transactions, users
from inventory_queries.queries.abstract import (
    Cardinality,
    Query,
    execute,
    fetch_many,
    fetch_one,
)

__all__ = [
    # Contract
    "Cardinality",
    "Query",
    "execute",
    "fetch_many",
    "fetch_one",
    # Entity modules
    "items",
    "transactions",
    "users",
]
