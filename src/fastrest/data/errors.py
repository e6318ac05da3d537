"""Data layer error hierarchy.

``ValidationError`` subclasses signal programmer error (a bad identifier,
operator, direction...) and are always raised to the caller.
``QueryError`` wraps engine faults; the CRUD helpers catch it, log it and
return ``False``.
"""

from fastrest.errors import FastRestError


class DataError(FastRestError):
    """Base for all fastrest.data errors."""


class DriverNotInstalledError(DataError):
    """Raised when the required database driver is not installed."""


class ConnectionError(DataError):  # noqa: A001
    """Raised when a database connection cannot be established."""


class QueryError(DataError):
    """Raised when the engine rejects or fails a statement."""


class ValidationError(DataError, ValueError):
    """A statement could not be built from the given arguments."""


class InvalidIdentifier(ValidationError):  # noqa: N818
    """A table or column name failed the identifier pattern."""


class InvalidOperator(ValidationError):  # noqa: N818
    """A WHERE operator is not in the allow-list."""


class InvalidJoinType(ValidationError):  # noqa: N818
    """A JOIN type is not one of INNER, LEFT, RIGHT, FULL OUTER, CROSS."""


class InvalidSortDirection(ValidationError):  # noqa: N818
    """An ORDER BY direction is neither ASC nor DESC."""


class InvalidLimit(ValidationError):  # noqa: N818
    """A LIMIT/OFFSET is not an integer in range."""


class EmptyArgument(ValidationError):  # noqa: N818
    """A mapping or sequence that must not be empty was empty."""
