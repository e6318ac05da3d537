"""Async SQLite driver using stdlib sqlite3 + anyio.

Runs every blocking sqlite3 call in a worker thread via
``anyio.to_thread``. Each statement gets its own cursor, created,
executed, drained and closed inside a single worker-thread hop, so a
cursor never outlives the call that opened it.

Uses Python 3.12+ features:
    - ``check_same_thread=False``: safe for anyio's thread pool dispatch
    - ``autocommit=True``: every statement commits on its own
"""

import sqlite3
from collections.abc import Callable, Mapping, Sequence
from typing import Any

import anyio

from fastrest.data._result import ExecResult


def _run_sync(func: Callable[..., Any], *args: Any) -> Any:
    """Run a blocking call in an anyio worker thread."""
    return anyio.to_thread.run_sync(func, *args)  # type: ignore[union-attr]


def _execute(
    conn: sqlite3.Connection,
    sql: str,
    params: Mapping[str, Any] | Sequence[Any],
) -> ExecResult:
    cursor = conn.cursor()
    try:
        cursor.execute(sql, params)
        if cursor.description is None:
            return ExecResult(rows=None, rowcount=cursor.rowcount)
        columns = [desc[0] for desc in cursor.description]
        rows = [dict(zip(columns, row, strict=True)) for row in cursor.fetchall()]
        return ExecResult(rows=rows, rowcount=len(rows))
    finally:
        cursor.close()


class AsyncConnection:
    """Async wrapper around ``sqlite3.Connection``."""

    __slots__ = ("_conn",)

    def __init__(self, conn: sqlite3.Connection) -> None:
        self._conn = conn

    async def run(self, sql: str, params: Mapping[str, Any] | Sequence[Any] = ()) -> ExecResult:
        """Execute one statement exactly once and collect its result."""
        return await _run_sync(_execute, self._conn, sql, params)

    async def close(self) -> None:
        await _run_sync(self._conn.close)


async def connect(path: str) -> AsyncConnection:
    """Open an autocommitting SQLite connection with foreign keys enforced."""

    def _open() -> sqlite3.Connection:
        conn = sqlite3.connect(path, autocommit=True, check_same_thread=False)
        conn.execute("PRAGMA foreign_keys=ON")
        return conn

    return AsyncConnection(await _run_sync(_open))
