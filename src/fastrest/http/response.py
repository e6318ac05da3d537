"""HTTP response with chainable ``.with_*()`` transformation API.

Each transformation returns a new Response. Handlers usually build one
through the JSON helpers::

    return json_response({"status": "success", "data": rows})
    return json_response({"message": "created"}, status=201)
    return error_response("Validation failed", 422, {"field": "name"})
    return no_content()
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, replace
from typing import Any

JSON_CONTENT_TYPE = "application/json; charset=utf-8"
NO_STORE = "no-store, no-cache, must-revalidate"


@dataclass(frozen=True, slots=True)
class Response:
    """An HTTP response built through immutable transformations."""

    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/plain; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    # -- Chainable transformations --

    def with_status(self, status: int) -> Response:
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> Response:
        """Return a new Response with *name* set to *value*.

        An existing header of the same name (case-insensitive) is replaced.
        """
        lowered = name.lower()
        kept = tuple((n, v) for n, v in self.headers if n.lower() != lowered)
        return replace(self, headers=(*kept, (name, value)))

    def with_headers(self, headers: Mapping[str, str]) -> Response:
        response = self
        for name, value in headers.items():
            response = response.with_header(name, value)
        return response

    def with_content_type(self, content_type: str) -> Response:
        return replace(self, content_type=content_type)

    # -- Accessors --

    def header(self, name: str, default: str | None = None) -> str | None:
        """Return the value of header *name* (case-insensitive)."""
        lowered = name.lower()
        if lowered == "content-type":
            return self.content_type
        for n, v in self.headers:
            if n.lower() == lowered:
                return v
        return default

    @property
    def body_bytes(self) -> bytes:
        if isinstance(self.body, str):
            return self.body.encode("utf-8")
        return self.body

    @property
    def text(self) -> str:
        if isinstance(self.body, bytes):
            return self.body.decode("utf-8")
        return self.body

    def json(self) -> Any:
        """Decode the body as JSON."""
        return json_module.loads(self.body_bytes)


def json_response(
    data: Any,
    status: int = 200,
    headers: Mapping[str, str] | None = None,
) -> Response:
    """Create a JSON response that is never cached by clients or proxies."""
    body = json_module.dumps(data, ensure_ascii=False, default=str)
    response = Response(body=body, status=status, content_type=JSON_CONTENT_TYPE)
    response = response.with_header("Cache-Control", NO_STORE)
    if headers:
        response = response.with_headers(headers)
    return response


def error_response(
    message: str,
    status: int = 400,
    extra: Mapping[str, Any] | None = None,
) -> Response:
    """Create the structured error envelope, merging *extra* fields into it."""
    return json_response(
        {"status": "error", "code": status, "message": message, **(extra or {})},
        status,
    )


def no_content() -> Response:
    """204 No Content (e.g. after a DELETE)."""
    return Response(body=b"", status=204)
