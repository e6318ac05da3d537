"""Immutable SELECT builder for fastrest.data.

Accumulates clauses through chaining methods and renders to a
``SqlStatement``: SQL text with ``:named`` placeholders plus the values
bound to them. Each method returns a new ``QueryBuilder``; the original
is never mutated, so a base query can be shared and refined per request.

Usage::

    from fastrest.data import Database, QueryBuilder

    rows = await (
        QueryBuilder("products", ["id", "name", "price"])
        .where("status", "=", "active")
        .or_where("featured", "=", 1)
        .order_by("name")
        .limit(10)
        .execute(db)
    )

Placeholder names are the column name (dots replaced by underscores)
plus a per-builder counter, so two conditions on one column never
collide::

    qb = QueryBuilder("products").where("price", ">", 10).where("price", "<", 100)
    qb.sql     # 'SELECT * FROM "products" WHERE "price" > :price_1 AND "price" < :price_2'
    qb.params  # {'price_1': 10, 'price_2': 100}

Table and column names go through ``IdentifierGuard``. ``where_raw``,
JOIN ``on`` conditions and ``having`` fragments are inserted verbatim;
keep request input out of them and bind values with ``with_param``.
"""

from __future__ import annotations

from collections.abc import Sequence
from dataclasses import dataclass, field, replace
from typing import TYPE_CHECKING, Any

from fastrest.data.errors import (
    EmptyArgument,
    InvalidJoinType,
    InvalidLimit,
    InvalidOperator,
    ValidationError,
)
from fastrest.data.identifiers import IdentifierGuard, placeholder_name
from fastrest.data.statements import SqlStatement, check_limit, normalize_direction

if TYPE_CHECKING:
    from fastrest.data.database import Database

OPERATORS: frozenset[str] = frozenset(
    {
        "=",
        "!=",
        "<>",
        "<",
        ">",
        "<=",
        ">=",
        "LIKE",
        "NOT LIKE",
        "IN",
        "NOT IN",
        "IS NULL",
        "IS NOT NULL",
    }
)
LIST_OPERATORS: frozenset[str] = frozenset({"IN", "NOT IN"})
NULL_OPERATORS: frozenset[str] = frozenset({"IS NULL", "IS NOT NULL"})
JOIN_TYPES: frozenset[str] = frozenset({"INNER", "LEFT", "RIGHT", "FULL OUTER", "CROSS"})


def normalize_operator(operator: object) -> str:
    """Uppercase *operator*, collapse inner whitespace and check the allow-list."""
    normalized = " ".join(operator.upper().split()) if isinstance(operator, str) else operator
    if normalized not in OPERATORS:
        msg = f"Invalid WHERE operator {operator!r}."
        raise InvalidOperator(msg)
    return normalized  # type: ignore[return-value]


def normalize_join_type(join_type: object) -> str:
    normalized = " ".join(join_type.upper().split()) if isinstance(join_type, str) else join_type
    if normalized not in JOIN_TYPES:
        msg = f"Invalid JOIN type {join_type!r}. Must be one of: INNER, LEFT, RIGHT, FULL OUTER, CROSS."
        raise InvalidJoinType(msg)
    return normalized  # type: ignore[return-value]


@dataclass(frozen=True, slots=True)
class WhereClause:
    """One WHERE condition and the placeholders it binds.

    ``raw`` clauses carry caller text and bind nothing themselves.
    """

    boolean: str
    column: str = ""
    operator: str = ""
    placeholders: tuple[str, ...] = ()
    raw: str | None = None

    def render(self, guard: IdentifierGuard) -> str:
        if self.raw is not None:
            return self.raw
        column = guard.quote(self.column)
        if self.operator in NULL_OPERATORS:
            return f"{column} {self.operator}"
        if self.operator in LIST_OPERATORS:
            names = ", ".join(f":{p}" for p in self.placeholders)
            return f"{column} {self.operator} ({names})"
        return f"{column} {self.operator} :{self.placeholders[0]}"


@dataclass(frozen=True, slots=True)
class QueryBuilder:
    """Immutable SELECT builder.

    Construct with a table name (and optionally the columns to select),
    chain methods to add clauses, then render with ``to_statement()`` or
    run with ``execute(db)``. Every method returns a new builder.

    Rendering order is fixed: SELECT, FROM, JOIN (registration order),
    WHERE, GROUP BY, HAVING, ORDER BY (registration order), LIMIT, OFFSET.
    """

    table: str
    _columns: tuple[str, ...] = ()
    guard: IdentifierGuard = field(default_factory=IdentifierGuard)
    _wheres: tuple[WhereClause, ...] = ()
    _params: tuple[tuple[str, Any], ...] = ()
    _counter: int = 0
    _joins: tuple[str, ...] = ()
    _group_by: str | None = None
    _having: str | None = None
    _order: tuple[str, ...] = ()
    _limit: int | None = None
    _offset: int | None = None

    def __post_init__(self) -> None:
        self.guard.validate(self.table)
        # Accept any sequence (or a lone name) and store a validated tuple
        object.__setattr__(self, "_columns", _check_columns(self.guard, self._columns))

    @classmethod
    def for_database(cls, db: Database, table: str, columns: Sequence[str] = ()) -> QueryBuilder:
        """A builder that quotes identifiers for *db*'s dialect."""
        return cls(table, columns, guard=db.guard)

    # -- Columns --

    def columns(self, columns: Sequence[str]) -> QueryBuilder:
        """Replace the selected columns. Empty means ``*``."""
        return replace(self, _columns=_check_columns(self.guard, columns))

    # -- WHERE --

    def where(self, column: str, operator: str, value: Any = None) -> QueryBuilder:
        """Add an AND-connected condition."""
        return self._add_where("AND", column, operator, value)

    def or_where(self, column: str, operator: str, value: Any = None) -> QueryBuilder:
        """Add an OR-connected condition."""
        return self._add_where("OR", column, operator, value)

    def where_if(self, condition: object, column: str, operator: str, value: Any = None) -> QueryBuilder:
        """Add an AND condition only if *condition* is truthy.

        ::

            QueryBuilder("products")
                .where_if(status, "status", "=", status)
                .where_if(search, "name", "LIKE", f"%{search}%")
        """
        if not condition:
            return self
        return self.where(column, operator, value)

    def where_raw(self, condition: str) -> QueryBuilder:
        """Append *condition* verbatim, AND-connected. Bind its values with ``with_param``."""
        clause = WhereClause(boolean="AND", raw=condition)
        return replace(self, _wheres=(*self._wheres, clause))

    def with_param(self, name: str, value: Any) -> QueryBuilder:
        """Bind *value* to ``:name`` for a raw fragment."""
        return replace(self, _params=(*self._params, (name, value)))

    # -- JOIN --

    def join(self, join_type: str, table: str, on: str | None = None) -> QueryBuilder:
        """Add a JOIN. *on* is inserted verbatim; CROSS joins take none."""
        kind = normalize_join_type(join_type)
        target = self.guard.quote(table)
        if kind == "CROSS":
            clause = f"CROSS JOIN {target}"
        else:
            if not on:
                msg = f"{kind} JOIN on {table!r} needs an ON condition."
                raise EmptyArgument(msg)
            clause = f"{kind} JOIN {target} ON {on}"
        return replace(self, _joins=(*self._joins, clause))

    def inner_join(self, table: str, on: str) -> QueryBuilder:
        return self.join("INNER", table, on)

    def left_join(self, table: str, on: str) -> QueryBuilder:
        return self.join("LEFT", table, on)

    # -- GROUP BY / HAVING --

    def group_by(self, column: str) -> QueryBuilder:
        """Set the GROUP BY column. Replaces any previous one."""
        return replace(self, _group_by=self.guard.quote(column))

    def having(self, condition: str) -> QueryBuilder:
        """Set the HAVING fragment. Needs ``group_by()`` before rendering."""
        return replace(self, _having=condition)

    # -- ORDER / LIMIT / OFFSET --

    def order_by(self, column: str, direction: str = "ASC") -> QueryBuilder:
        clause = f"{self.guard.quote(column)} {normalize_direction(direction)}"
        return replace(self, _order=(*self._order, clause))

    def limit(self, n: int) -> QueryBuilder:
        return replace(self, _limit=check_limit(n))

    def offset(self, n: int) -> QueryBuilder:
        """Set OFFSET (rows to skip). SQLite only accepts it after a LIMIT.

        ::

            QueryBuilder("products").limit(20).offset(40)  # page 3
        """
        if not isinstance(n, int) or isinstance(n, bool) or n < 0:
            msg = f"OFFSET must be a non-negative integer, got {n!r}."
            raise InvalidLimit(msg)
        return replace(self, _offset=n)

    # -- Rendering --

    @property
    def sql(self) -> str:
        """The exact SQL that will run."""
        columns = ", ".join(self._quote_column(c) for c in self._columns) or "*"
        parts = [f"SELECT {columns} FROM {self.guard.quote(self.table)}"]
        parts.extend(self._joins)
        if self._wheres:
            rendered: list[str] = []
            for i, clause in enumerate(self._wheres):
                text = clause.render(self.guard)
                rendered.append(text if i == 0 else f"{clause.boolean} {text}")
            parts.append("WHERE " + " ".join(rendered))
        if self._having is not None and self._group_by is None:
            msg = "HAVING requires a GROUP BY column; call group_by() first."
            raise ValidationError(msg)
        if self._group_by is not None:
            parts.append(f"GROUP BY {self._group_by}")
        if self._having is not None:
            parts.append(f"HAVING {self._having}")
        if self._order:
            parts.append("ORDER BY " + ", ".join(self._order))
        if self._limit is not None:
            parts.append(f"LIMIT {self._limit}")
        if self._offset is not None:
            parts.append(f"OFFSET {self._offset}")
        return " ".join(parts)

    @property
    def params(self) -> dict[str, Any]:
        """Placeholder name to value, in binding order."""
        return dict(self._params)

    def to_statement(self) -> SqlStatement:
        return SqlStatement(self.sql, self.params)

    # -- Execution --

    async def execute(self, db: Database) -> list[dict[str, Any]]:
        """Run through ``db.prepared_query``; ``[]`` when no rows came back."""
        stmt = self.to_statement()
        result = await db.prepared_query(stmt.text, stmt.params)
        return result if isinstance(result, list) else []

    async def first(self, db: Database) -> dict[str, Any] | None:
        """The first matching row, or ``None``."""
        rows = await self.limit(1).execute(db)
        return rows[0] if rows else None

    async def count(self, db: Database) -> int:
        """COUNT(*) over the same FROM, JOIN and WHERE clauses.

        Ignores ``columns()``, grouping, ordering, ``limit()`` and ``offset()``.
        """
        counter = replace(
            self,
            _columns=(),
            _group_by=None,
            _having=None,
            _order=(),
            _limit=None,
            _offset=None,
        )
        sql = counter.sql.replace("SELECT * FROM", "SELECT COUNT(*) AS n FROM", 1)
        result = await db.prepared_query(sql, counter.params)
        if isinstance(result, list) and result:
            return int(result[0]["n"])
        return 0

    # -- Internals --

    def _add_where(self, boolean: str, column: str, operator: str, value: Any) -> QueryBuilder:
        op = normalize_operator(operator)
        self.guard.validate(column)
        base = placeholder_name(column)
        counter = self._counter
        bound: list[tuple[str, Any]] = []

        if op in LIST_OPERATORS:
            if isinstance(value, (str, bytes)) or not isinstance(value, Sequence):
                msg = f"{op} expects a list or tuple of values, got {type(value).__name__}."
                raise ValidationError(msg)
            if not value:
                msg = f"{op} needs at least one value."
                raise EmptyArgument(msg)
            for item in value:
                counter += 1
                bound.append((f"{base}_{counter}", item))
        elif op not in NULL_OPERATORS:
            counter += 1
            bound.append((f"{base}_{counter}", value))

        clause = WhereClause(
            boolean=boolean,
            column=column,
            operator=op,
            placeholders=tuple(name for name, _ in bound),
        )
        return replace(
            self,
            _wheres=(*self._wheres, clause),
            _params=(*self._params, *bound),
            _counter=counter,
        )

    def _quote_column(self, column: str) -> str:
        return column if column == "*" else self.guard.quote(column)


def _check_columns(guard: IdentifierGuard, columns: Sequence[str]) -> tuple[str, ...]:
    if isinstance(columns, str):
        columns = [columns]
    for column in columns:
        if column != "*":
            guard.validate(column)
    return tuple(columns)
