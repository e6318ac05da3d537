"""Parameterized CRUD statement builders.

Each builder returns a ``SqlStatement``: SQL text with ``:named``
placeholders plus the mapping that binds them. Every value gets its own
placeholder; only guarded identifiers and whitelisted keywords reach the
text. ``Database`` executes these; they are also usable on their own::

    stmt = build_update(guard, "products", {"price": 9.5}, {"id": 7})
    stmt.text    # 'UPDATE "products" SET "price" = :set_price WHERE "id" = :where_id'
    stmt.params  # {'set_price': 9.5, 'where_id': 7}
"""

from collections.abc import Mapping, Sequence
from dataclasses import dataclass, field
from typing import Any

from fastrest.data.errors import EmptyArgument, InvalidLimit, InvalidSortDirection
from fastrest.data.identifiers import IdentifierGuard, placeholder_name

DIRECTIONS: frozenset[str] = frozenset({"ASC", "DESC"})


@dataclass(frozen=True, slots=True)
class SqlStatement:
    """SQL text with named placeholders and the values bound to them."""

    text: str
    params: dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.text


def normalize_direction(direction: object) -> str:
    """Uppercase *direction* and check it against ASC/DESC."""
    normalized = direction.upper() if isinstance(direction, str) else direction
    if normalized not in DIRECTIONS:
        msg = f"Invalid ORDER BY direction {direction!r}. Must be ASC or DESC."
        raise InvalidSortDirection(msg)
    return normalized  # type: ignore[return-value]


def check_limit(limit: object) -> int:
    """Return *limit* if it is a positive ``int`` (bools rejected)."""
    if not isinstance(limit, int) or isinstance(limit, bool) or limit < 1:
        msg = f"LIMIT must be a positive integer, got {limit!r}."
        raise InvalidLimit(msg)
    return limit


def _require(mapping: Mapping[str, Any], arg_name: str) -> None:
    if not mapping:
        msg = f"'{arg_name}' must not be empty."
        raise EmptyArgument(msg)


def _bind(
    guard: IdentifierGuard,
    values: Mapping[str, Any],
    prefix: str,
    params: dict[str, Any],
) -> list[tuple[str, str]]:
    """Bind each value under its own placeholder; return (quoted column, placeholder) pairs."""
    bound: list[tuple[str, str]] = []
    for column, value in values.items():
        quoted = guard.quote(column)
        name = prefix + placeholder_name(column)
        base, n = name, 2
        while name in params:
            name = f"{base}_{n}"
            n += 1
        params[name] = value
        bound.append((quoted, f":{name}"))
    return bound


def _assignments(
    guard: IdentifierGuard,
    values: Mapping[str, Any],
    prefix: str,
    params: dict[str, Any],
) -> list[str]:
    return [f"{column} = {placeholder}" for column, placeholder in _bind(guard, values, prefix, params)]


def build_insert(guard: IdentifierGuard, table: str, data: Mapping[str, Any]) -> SqlStatement:
    quoted_table = guard.quote(table)
    _require(data, "data")
    params: dict[str, Any] = {}
    bound = _bind(guard, data, "", params)
    columns = [column for column, _ in bound]
    placeholders = [placeholder for _, placeholder in bound]
    text = f"INSERT INTO {quoted_table} ({', '.join(columns)}) VALUES ({', '.join(placeholders)})"
    return SqlStatement(text, params)


def build_update(
    guard: IdentifierGuard,
    table: str,
    data: Mapping[str, Any],
    where: Mapping[str, Any],
) -> SqlStatement:
    """UPDATE with ``set_``/``where_`` placeholder namespaces.

    Raises ``EmptyArgument`` for an empty SET or WHERE mapping; an
    unconditioned UPDATE is never built.
    """
    quoted_table = guard.quote(table)
    _require(data, "data")
    _require(where, "where")
    params: dict[str, Any] = {}
    sets = _assignments(guard, data, "set_", params)
    conditions = _assignments(guard, where, "where_", params)
    text = f"UPDATE {quoted_table} SET {', '.join(sets)} WHERE {' AND '.join(conditions)}"
    return SqlStatement(text, params)


def build_delete(guard: IdentifierGuard, table: str, where: Mapping[str, Any]) -> SqlStatement:
    """DELETE with AND-joined conditions. Raises ``EmptyArgument`` for an empty WHERE."""
    quoted_table = guard.quote(table)
    _require(where, "where")
    params: dict[str, Any] = {}
    conditions = _assignments(guard, where, "", params)
    return SqlStatement(f"DELETE FROM {quoted_table} WHERE {' AND '.join(conditions)}", params)


def build_select(
    guard: IdentifierGuard,
    table: str,
    columns: Sequence[str] = (),
    where: Mapping[str, Any] | None = None,
    order: Mapping[str, str] | None = None,
    limit: int | None = None,
) -> SqlStatement:
    """SELECT with AND-joined equality conditions, ordering and a limit.

    Order directions are case-insensitive and rendered uppercase; anything
    but ASC/DESC raises ``InvalidSortDirection``. ``limit`` is rendered
    as a literal integer.
    """
    if isinstance(columns, str):
        columns = [columns]
    parts = [
        "SELECT",
        ", ".join(guard.quote(c) for c in columns) if columns else "*",
        "FROM",
        guard.quote(table),
    ]
    params: dict[str, Any] = {}
    if where:
        parts.append("WHERE " + " AND ".join(_assignments(guard, where, "", params)))
    if order:
        clauses = [f"{guard.quote(column)} {normalize_direction(d)}" for column, d in order.items()]
        parts.append("ORDER BY " + ", ".join(clauses))
    if limit is not None:
        parts.append(f"LIMIT {check_limit(limit)}")
    return SqlStatement(" ".join(parts), params)
