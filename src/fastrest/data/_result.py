"""Driver-neutral statement result."""

from dataclasses import dataclass
from typing import Any


@dataclass(frozen=True, slots=True)
class ExecResult:
    """What one executed statement produced.

    ``rows`` is ``None`` when the statement had no result set (INSERT,
    UPDATE, DDL...) and a list of ``{column: value}`` dicts otherwise.
    """

    rows: list[dict[str, Any]] | None
    rowcount: int = -1
