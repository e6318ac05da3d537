"""SQL identifier validation and quoting.

Every table and column name goes through ``IdentifierGuard`` before it is
concatenated into SQL text, whether it came from code or from a caller.
Values never do: they are bound through placeholders.
"""

import re
from dataclasses import dataclass

from fastrest.data.errors import InvalidIdentifier

IDENTIFIER = re.compile(r"^[A-Za-z_][A-Za-z0-9_.]*$")

# Identifier quote character per dialect
QUOTE_CHARS: dict[str, str] = {
    "sqlite": '"',
    "postgresql": '"',
    "mysql": "`",
}


@dataclass(frozen=True, slots=True)
class IdentifierGuard:
    """Validate and quote identifiers for one SQL dialect.

    ::

        guard = IdentifierGuard("sqlite")
        guard.quote("products")        # '"products"'
        guard.quote("products.name")   # '"products"."name"'
        guard.quote("products; DROP")  # raises InvalidIdentifier
    """

    dialect: str = "sqlite"

    @property
    def quote_char(self) -> str:
        return QUOTE_CHARS.get(self.dialect, '"')

    def validate(self, name: object) -> str:
        """Return *name* unchanged if it is a safe identifier."""
        if not isinstance(name, str) or not IDENTIFIER.fullmatch(name):
            msg = f"Invalid SQL identifier: {name!r}"
            raise InvalidIdentifier(msg)
        if any(not part for part in name.split(".")):
            msg = f"Invalid SQL identifier: {name!r} (empty name part)"
            raise InvalidIdentifier(msg)
        return name

    def quote(self, name: object) -> str:
        """Validate, then quote each dot-separated part of *name*."""
        q = self.quote_char
        return ".".join(
            f"{q}{part.replace(q, q + q)}{q}" for part in self.validate(name).split(".")
        )


def placeholder_name(column: str) -> str:
    """A bind-parameter-safe name derived from a (possibly qualified) column."""
    return column.replace(".", "_")
