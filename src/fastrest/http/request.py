"""Immutable HTTP request.

Frozen metadata with async body access. Middleware that "changes" the
request (route parameters, parsed body) returns a new one through the
``with_*()`` methods and hands that to ``next``.
"""

from __future__ import annotations

import json as json_module
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any

from fastrest._internal.asgi import Receive
from fastrest.http.headers import Headers
from fastrest.http.query import QueryParams

# Sentinel distinguishing "no body parser ran" from a parsed ``null`` body.
_UNPARSED: Any = object()


async def _empty_receive() -> dict[str, Any]:
    return {"type": "http.request", "body": b"", "more_body": False}


@dataclass(frozen=True, slots=True)
class Request:
    """An immutable HTTP request.

    ``path_params`` holds the URL-decoded segments captured by the router.
    ``parsed_body`` holds whatever a body-parsing middleware attached; the
    core never parses the body itself.
    """

    method: str
    path: str
    headers: Headers
    query: QueryParams
    path_params: Mapping[str, str] = field(default_factory=dict)
    client: tuple[str, int] | None = None
    parsed_body: Any = _UNPARSED

    # Private: ASGI receive callable for body streaming
    _receive: Receive = _empty_receive

    # Private: shared body cache, carried across ``with_*()`` copies so the
    # ASGI receive channel is consumed only once.
    _cache: dict[str, Any] = field(default_factory=dict, repr=False, compare=False)

    # -- Computed properties --

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def has_parsed_body(self) -> bool:
        return self.parsed_body is not _UNPARSED

    @property
    def url(self) -> str:
        """Path plus query string, as received."""
        qs = self.query.raw
        if qs:
            return f"{self.path}?{qs.decode('latin-1')}"
        return self.path

    def param(self, name: str, default: str | None = None) -> str | None:
        """Return a route-captured path parameter."""
        return self.path_params.get(name, default)

    def body_data(self) -> dict[str, Any]:
        """The parsed body as a dict; ``{}`` when absent or not an object."""
        if isinstance(self.parsed_body, dict):
            return self.parsed_body
        return {}

    # -- Derived requests --

    def with_path_params(self, params: Mapping[str, str]) -> Request:
        """Return a new Request carrying route-captured parameters."""
        return replace(self, path_params={**self.path_params, **params})

    def with_parsed_body(self, data: Any) -> Request:
        """Return a new Request with a parsed body attached."""
        return replace(self, parsed_body=data)

    # -- Async body access --

    async def body(self) -> bytes:
        """The full request body.

        Drained from the ASGI channel on first call; later calls, on this
        request or any ``with_*()`` copy of it, reuse the cached bytes.
        """
        cached = self._cache.get("_body")
        if cached is not None:
            return cached
        buffer = bytearray()
        more = True
        while more:
            message = await self._receive()
            buffer += message.get("body", b"")
            more = message.get("more_body", False)
        self._cache["_body"] = data = bytes(buffer)
        return data

    async def json(self) -> Any:
        return json_module.loads(await self.body())

    async def text(self) -> str:
        return (await self.body()).decode("utf-8")

    # -- Factories --

    @classmethod
    def from_asgi(cls, scope: Mapping[str, Any], receive: Receive) -> Request:
        """Create a Request from an ASGI scope and receive callable."""
        client = scope.get("client")
        # Keep the path percent-encoded; the router decodes captured segments.
        raw_path = scope.get("raw_path")
        path = raw_path.decode("latin-1").partition("?")[0] if raw_path else scope["path"]
        return cls(
            method=scope["method"].upper(),
            path=path,
            headers=Headers(tuple(scope.get("headers", ()))),
            query=QueryParams(scope.get("query_string", b"")),
            client=tuple(client) if client else None,
            _receive=receive,
        )

    @classmethod
    def build(
        cls,
        method: str,
        target: str,
        *,
        headers: Mapping[str, str] | None = None,
        body: bytes = b"",
    ) -> Request:
        """Create a Request without an ASGI server.

        ``target`` may include a query string. Handy for unit tests::

            request = Request.build("GET", "/products?status=active")
        """
        path, _, query_string = target.partition("?")
        request = cls(
            method=method.upper(),
            path=path,
            headers=Headers.from_mapping(headers or {}),
            query=QueryParams(query_string.encode("latin-1")),
        )
        request._cache["_body"] = body
        return request
