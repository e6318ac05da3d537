"""fastrest exception hierarchy.

Shared across Router, pipeline, middleware and handlers so every module
raises and catches the same types.
"""

from __future__ import annotations

from collections.abc import Mapping
from dataclasses import dataclass


class FastRestError(Exception):
    """Base for all fastrest-specific errors."""


class ConfigurationError(FastRestError):
    """Raised when routes, middleware or app settings are invalid.

    Typically surfaces at startup, when the app freezes.
    """


@dataclass(frozen=True, slots=True)
class HTTPError(FastRestError):
    """An error that maps directly to an HTTP status code.

    Raised by the router, middleware or handlers. The middleware pipeline
    catches it exactly once and turns it into a JSON error response.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)

    @classmethod
    def of(cls, status: int, detail: str = "", headers: Mapping[str, str] | None = None) -> HTTPError:
        """Build an ``HTTPError`` from a plain header mapping.

        ::

            raise HTTPError.of(409, "Duplicate SKU", {"X-Conflict": "sku"})
        """
        return cls(status=status, detail=detail, headers=tuple((headers or {}).items()))


class BadRequest(HTTPError):  # noqa: N818
    """400 — the request could not be understood (e.g. malformed JSON)."""

    def __init__(self, detail: str = "Bad Request") -> None:
        super().__init__(status=400, detail=detail)


class NotFound(HTTPError):  # noqa: N818
    """404 — no route matched the request path, or the resource is missing."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405 — the path exists but not for this HTTP method.

    Carries an ``Allow`` header listing the methods the matched pattern
    does support, sorted and comma-joined.
    """

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        super().__init__(
            status=405,
            detail=detail or f"Method Not Allowed. Allowed: {allow_value}",
            headers=(("Allow", allow_value),),
        )


class UnprocessableEntity(HTTPError):  # noqa: N818
    """422 — the payload is well-formed but semantically invalid."""

    def __init__(self, detail: str = "Unprocessable Entity") -> None:
        super().__init__(status=422, detail=detail)


class InternalServerError(HTTPError):  # noqa: N818
    """500 — a handler-declared server failure (e.g. a failed write)."""

    def __init__(self, detail: str = "Internal Server Error") -> None:
        super().__init__(status=500, detail=detail)
