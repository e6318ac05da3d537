"""Async PostgreSQL driver on top of ``asyncpg`` (optional dependency).

asyncpg speaks ``$1, $2`` positional parameters; statements built by
fastrest use ``:name`` placeholders, which are rewritten here.
"""

import re
from collections.abc import Mapping, Sequence
from typing import Any

from fastrest.data._result import ExecResult
from fastrest.data.errors import DriverNotInstalledError, QueryError

# ``:name`` but not the ``::type`` cast operator
_NAMED = re.compile(r"(?<![:\w]):([A-Za-z_][A-Za-z0-9_]*)")


def to_positional(sql: str, params: Mapping[str, Any]) -> tuple[str, list[Any]]:
    """Rewrite ``:name`` placeholders to ``$n`` and order the values to match.

    A name used twice maps to the same ``$n``.
    """
    positions: dict[str, int] = {}
    values: list[Any] = []

    def _sub(m: re.Match[str]) -> str:
        name = m.group(1)
        if name not in params:
            msg = f"No value bound for placeholder :{name}"
            raise QueryError(msg)
        if name not in positions:
            values.append(params[name])
            positions[name] = len(values)
        return f"${positions[name]}"

    return _NAMED.sub(_sub, sql), values


def _rowcount(status: str | None) -> int:
    # asyncpg returns "INSERT 0 1" / "UPDATE 3" style status strings
    parts = (status or "").split()
    if parts and parts[-1].isdigit():
        return int(parts[-1])
    return -1


class AsyncPgConnection:
    """A single asyncpg connection exposing the driver-neutral ``run``."""

    __slots__ = ("_conn",)

    def __init__(self, conn: Any) -> None:
        self._conn = conn

    async def run(self, sql: str, params: Mapping[str, Any] | Sequence[Any] = ()) -> ExecResult:
        if isinstance(params, Mapping):
            sql, args = to_positional(sql, params)
        else:
            args = list(params)
        stmt = await self._conn.prepare(sql)
        records = await stmt.fetch(*args)
        if not stmt.get_attributes():
            return ExecResult(rows=None, rowcount=_rowcount(stmt.get_statusmsg()))
        rows = [dict(record) for record in records]
        return ExecResult(rows=rows, rowcount=len(rows))

    async def close(self) -> None:
        await self._conn.close()


async def connect(url: str) -> AsyncPgConnection:
    try:
        import asyncpg
    except ImportError:
        msg = (
            "fastrest.data requires 'asyncpg' for PostgreSQL databases. "
            "Install it with: pip install fastrest[pg]"
        )
        raise DriverNotInstalledError(msg) from None

    return AsyncPgConnection(await asyncpg.connect(url))
