"""
Queries against the `users` table.

A user whose `deleted_at` is set is soft-deleted: every lookup, the list, the
count and `update_user` skip it. Only `hard_delete_user` still reaches it, and
removes the row for good.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import List, Optional

from inventory_queries.domain.models import CountRow, User
from inventory_queries.infrastructure.store import StoreClient
from inventory_queries.queries.abstract import Query, execute, fetch_many, fetch_one

GET_USER_BY_ID = Query.parse("""-- name: GetUserByID :one
SELECT id, public_id, email, username, display_name, created_at, updated_at, deleted_at FROM users
WHERE id = $1 AND deleted_at IS NULL
LIMIT 1""")

GET_USER_BY_PUBLIC_ID = Query.parse("""-- name: GetUserByPublicID :one
SELECT id, public_id, email, username, display_name, created_at, updated_at, deleted_at FROM users
WHERE public_id = $1 AND deleted_at IS NULL
LIMIT 1""")

GET_USER_BY_EMAIL = Query.parse("""-- name: GetUserByEmail :one
SELECT id, public_id, email, username, display_name, created_at, updated_at, deleted_at FROM users
WHERE email = $1 AND deleted_at IS NULL
LIMIT 1""")

GET_USER_BY_USERNAME = Query.parse("""-- name: GetUserByUsername :one
SELECT id, public_id, email, username, display_name, created_at, updated_at, deleted_at FROM users
WHERE username = $1 AND deleted_at IS NULL
LIMIT 1""")

LIST_USERS = Query.parse("""-- name: ListUsers :many
SELECT id, public_id, email, username, display_name, created_at, updated_at, deleted_at FROM users
WHERE deleted_at IS NULL
ORDER BY created_at DESC
LIMIT $1 OFFSET $2""")

COUNT_USERS = Query.parse("""-- name: CountUsers :one
SELECT COUNT(*) FROM users
WHERE deleted_at IS NULL""")

CREATE_USER = Query.parse("""-- name: CreateUser :one
INSERT INTO users (
    email,
    username,
    display_name
) VALUES (
    $1, $2, $3
) RETURNING id, public_id, email, username, display_name, created_at, updated_at, deleted_at""")

UPDATE_USER = Query.parse("""-- name: UpdateUser :one
UPDATE users
SET
    email = COALESCE($2, email),
    username = COALESCE($3, username),
    display_name = COALESCE($4, display_name)
WHERE id = $1 AND deleted_at IS NULL
RETURNING id, public_id, email, username, display_name, created_at, updated_at, deleted_at""")

SOFT_DELETE_USER = Query.parse("""-- name: SoftDeleteUser :exec
UPDATE users
SET deleted_at = NOW()
WHERE id = $1 AND deleted_at IS NULL""")

HARD_DELETE_USER = Query.parse("""-- name: HardDeleteUser :exec
DELETE FROM users
WHERE id = $1""")


@dataclass(frozen=True)
class GetUserByIDArgs:
    id: str


@dataclass(frozen=True)
class GetUserByPublicIDArgs:
    public_id: str


@dataclass(frozen=True)
class GetUserByEmailArgs:
    email: str


@dataclass(frozen=True)
class GetUserByUsernameArgs:
    username: str


@dataclass(frozen=True)
class ListUsersArgs:
    limit: int
    offset: int


@dataclass(frozen=True)
class CreateUserArgs:
    email: str
    username: str
    display_name: Optional[str]


@dataclass(frozen=True)
class UpdateUserArgs:
    id: str
    email: Optional[str]
    username: Optional[str]
    display_name: Optional[str]


@dataclass(frozen=True)
class SoftDeleteUserArgs:
    id: str


@dataclass(frozen=True)
class HardDeleteUserArgs:
    id: str


async def get_user_by_id(store: StoreClient, args: GetUserByIDArgs) -> Optional[User]:
    return await fetch_one(store, GET_USER_BY_ID, args, User.from_row)


async def get_user_by_public_id(store: StoreClient, args: GetUserByPublicIDArgs) -> Optional[User]:
    return await fetch_one(store, GET_USER_BY_PUBLIC_ID, args, User.from_row)


async def get_user_by_email(store: StoreClient, args: GetUserByEmailArgs) -> Optional[User]:
    return await fetch_one(store, GET_USER_BY_EMAIL, args, User.from_row)


async def get_user_by_username(store: StoreClient, args: GetUserByUsernameArgs) -> Optional[User]:
    return await fetch_one(store, GET_USER_BY_USERNAME, args, User.from_row)


async def list_users(store: StoreClient, args: ListUsersArgs) -> List[User]:
    """Live users, newest first."""
    return await fetch_many(store, LIST_USERS, args, User.from_row)


async def count_users(store: StoreClient) -> Optional[CountRow]:
    return await fetch_one(store, COUNT_USERS, None, CountRow.from_row)


async def create_user(store: StoreClient, args: CreateUserArgs) -> Optional[User]:
    return await fetch_one(store, CREATE_USER, args, User.from_row)


async def update_user(store: StoreClient, args: UpdateUserArgs) -> Optional[User]:
    """
    Overwrite the non-None fields of a live user; None keeps the stored
    value. Returns None when the user does not exist or is soft-deleted.
    """
    return await fetch_one(store, UPDATE_USER, args, User.from_row)


async def soft_delete_user(store: StoreClient, args: SoftDeleteUserArgs) -> None:
    """Stamp `deleted_at`; a no-op for users already soft-deleted."""
    await execute(store, SOFT_DELETE_USER, args)


async def hard_delete_user(store: StoreClient, args: HardDeleteUserArgs) -> None:
    """Remove the row whether or not it was soft-deleted."""
    await execute(store, HARD_DELETE_USER, args)


__all__ = [
    "COUNT_USERS",
    "CREATE_USER",
    "GET_USER_BY_EMAIL",
    "GET_USER_BY_ID",
    "GET_USER_BY_PUBLIC_ID",
    "GET_USER_BY_USERNAME",
    "HARD_DELETE_USER",
    "LIST_USERS",
    "SOFT_DELETE_USER",
    "UPDATE_USER",
    "CreateUserArgs",
    "GetUserByEmailArgs",
    "GetUserByIDArgs",
    "GetUserByPublicIDArgs",
    "GetUserByUsernameArgs",
    "HardDeleteUserArgs",
    "ListUsersArgs",
    "SoftDeleteUserArgs",
    "UpdateUserArgs",
    "count_users",
    "create_user",
    "get_user_by_email",
    "get_user_by_id",
    "get_user_by_public_id",
    "get_user_by_username",
    "hard_delete_user",
    "list_users",
    "soft_delete_user",
    "update_user",
]
