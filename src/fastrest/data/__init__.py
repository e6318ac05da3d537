"""Parameterized async database access for fastrest.

Identifiers are validated and quoted, values are always bound. Not an ORM.

Basic usage::

    from fastrest.data import Database, QueryBuilder

    db = Database("sqlite:///app.db")

    await db.insert("products", {"name": "Lamp", "price": 25})
    rows = await db.select("products", where={"name": "Lamp"})

    cheap = await (
        QueryBuilder("products")
        .where("price", "<", 30)
        .order_by("price", "desc")
        .execute(db)
    )

SQLite works out of the box; PostgreSQL needs ``asyncpg``::

    pip install fastrest[pg]
"""

from fastrest.data.database import Database, get_db, sanitize_error
from fastrest.data.errors import (
    DataError,
    DriverNotInstalledError,
    EmptyArgument,
    InvalidIdentifier,
    InvalidJoinType,
    InvalidLimit,
    InvalidOperator,
    InvalidSortDirection,
    QueryError,
    ValidationError,
)
from fastrest.data.identifiers import IdentifierGuard
from fastrest.data.query import QueryBuilder
from fastrest.data.statements import (
    SqlStatement,
    build_delete,
    build_insert,
    build_select,
    build_update,
)

__all__ = [
    "DataError",
    "Database",
    "DriverNotInstalledError",
    "EmptyArgument",
    "IdentifierGuard",
    "InvalidIdentifier",
    "InvalidJoinType",
    "InvalidLimit",
    "InvalidOperator",
    "InvalidSortDirection",
    "QueryBuilder",
    "QueryError",
    "SqlStatement",
    "ValidationError",
    "build_delete",
    "build_insert",
    "build_select",
    "build_update",
    "get_db",
    "sanitize_error",
]
