"""Verb-aware router with ordered, segment-wise pattern matching.

Routes are registered during setup and the table is frozen by
``compile()``. Patterns are tried in registration order; the first one
whose *shape* matches the request path decides the outcome, so a
wrong verb on that pattern is a 405 even if a later pattern would have
accepted it.
"""

from __future__ import annotations

import re
from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any
from urllib.parse import unquote

from fastrest._internal.invoke import invoke
from fastrest.errors import ConfigurationError, MethodNotAllowed, NotFound
from fastrest.http.request import Request
from fastrest.http.response import Response
from fastrest.routing.registry import HandlerResolver
from fastrest.routing.route import (
    METHODS,
    HandlerRef,
    MatchResult,
    MethodMismatch,
    NoMatch,
    PathSegment,
    Route,
    RouteMatch,
)

_PARAM = re.compile(r"^\{([A-Za-z_][A-Za-z0-9_]*)\}$")


def normalize_path(path: str) -> str:
    """Return *path* with exactly one leading slash."""
    return "/" + path.lstrip("/")


def parse_path(path: str) -> tuple[PathSegment, ...]:
    """Parse a route pattern into segments.

    Examples::

        "/products"       -> (PathSegment("products"),)
        "/products/{id}"  -> (PathSegment("products"), PathSegment("{id}", True, "id"))
        "/"               -> (PathSegment(""),)

    Only a whole segment of the form ``{name}`` is a placeholder; anything
    else (``{1x}``, ``v{n}``) is matched literally.
    """
    segments: list[PathSegment] = []
    for part in normalize_path(path)[1:].split("/"):
        m = _PARAM.match(part)
        if m:
            segments.append(PathSegment(value=part, is_param=True, param_name=m.group(1)))
        else:
            segments.append(PathSegment(value=part))
    return tuple(segments)


def split_request_path(path: str) -> list[str]:
    """Split a request path (query string stripped) into raw segments."""
    path = path.split("?", 1)[0]
    return normalize_path(path)[1:].split("/")


@dataclass(slots=True)
class _PatternEntry:
    """One normalized pattern and the routes registered on it, per verb."""

    pattern: str
    segments: tuple[PathSegment, ...]
    routes_by_method: dict[str, Route] = field(default_factory=dict)

    def match_shape(self, parts: list[str]) -> dict[str, str] | None:
        """Return captured params if *parts* has this pattern's shape."""
        if len(parts) != len(self.segments):
            return None
        params: dict[str, str] = {}
        for seg, part in zip(self.segments, parts, strict=True):
            if seg.is_param:
                if not part:
                    return None
                # Repeated names: the last capture wins.
                params[seg.param_name or ""] = unquote(part)
            elif seg.value != part:
                return None
        return params


class Router:
    """Ordered route table keyed by pattern, then by HTTP method.

    Usage::

        router = Router()
        router.get("/products", list_products)
        router.get("/products/{id}", show_product)
        router.compile()

        match = router.match("GET", "/products/42")
        match.path_params  # {"id": "42"}

    The router is also the pipeline's terminal handler: ``await
    router.handle(request)`` matches, binds the params into the request
    and calls the handler.
    """

    __slots__ = ("_compiled", "_patterns", "_resolver")

    def __init__(self, resolver: HandlerResolver | None = None) -> None:
        self._patterns: dict[str, _PatternEntry] = {}
        self._resolver = resolver
        self._compiled = False

    # -- Registration --

    def add(self, method: str, path: str, handler: HandlerRef) -> Router:
        """Register *handler* for (*method*, *path*). Last registration wins."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise ConfigurationError(msg)
        method = method.upper()
        if method not in METHODS:
            msg = f"Unsupported HTTP method {method!r}. Supported: {', '.join(METHODS)}"
            raise ConfigurationError(msg)
        if isinstance(handler, str) and self._resolver is None:
            msg = f"Handler key {handler!r} needs a HandlerResolver on the Router."
            raise ConfigurationError(msg)

        pattern = normalize_path(path)
        entry = self._patterns.get(pattern)
        if entry is None:
            entry = _PatternEntry(pattern=pattern, segments=parse_path(pattern))
            self._patterns[pattern] = entry
        entry.routes_by_method[method] = Route(method=method, path=pattern, handler=handler)
        return self

    def get(self, path: str, handler: HandlerRef) -> Router:
        return self.add("GET", path, handler)

    def post(self, path: str, handler: HandlerRef) -> Router:
        return self.add("POST", path, handler)

    def put(self, path: str, handler: HandlerRef) -> Router:
        return self.add("PUT", path, handler)

    def patch(self, path: str, handler: HandlerRef) -> Router:
        return self.add("PATCH", path, handler)

    def delete(self, path: str, handler: HandlerRef) -> Router:
        return self.add("DELETE", path, handler)

    def any(self, path: str, handler: HandlerRef) -> Router:
        """Register the same handler for every supported method."""
        for method in METHODS:
            self.add(method, path, handler)
        return self

    def route(
        self, path: str, *, methods: list[str] | None = None
    ) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
        """Register a handler via decorator. Defaults to ``["GET"]``."""

        def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
            for method in methods or ["GET"]:
                self.add(method, path, func)
            return func

        return decorator

    def compile(self) -> None:
        """Freeze the route table. No more routes can be added."""
        self._compiled = True

    @property
    def routes(self) -> list[Route]:
        """All registered routes, in registration order."""
        return [route for entry in self._patterns.values() for route in entry.routes_by_method.values()]

    # -- Matching --

    def resolve(self, method: str, path: str) -> MatchResult:
        """Match *method* and *path* without raising."""
        method = method.upper()
        parts = split_request_path(path)
        for entry in self._patterns.values():
            params = entry.match_shape(parts)
            if params is None:
                continue
            route = entry.routes_by_method.get(method)
            if route is None:
                return MethodMismatch(path=entry.pattern, allowed=frozenset(entry.routes_by_method))
            return RouteMatch(route=route, path_params=params)
        return NoMatch(path=path)

    def match(self, method: str, path: str) -> RouteMatch:
        """Match a request against the table.

        Raises ``NotFound`` when no pattern has the path's shape and
        ``MethodNotAllowed`` when the first matching shape lacks the verb.
        """
        result = self.resolve(method, path)
        if isinstance(result, MethodMismatch):
            raise MethodNotAllowed(result.allowed)
        if isinstance(result, NoMatch):
            raise NotFound()
        return result

    def resolve_handler(self, route: Route) -> Callable[..., Any]:
        if isinstance(route.handler, str):
            # add() guarantees a resolver exists for string keys
            return self._resolver.resolve(route.handler)  # type: ignore[union-attr]
        return route.handler

    # -- Terminal handler --

    async def handle(self, request: Request) -> Response:
        """Dispatch *request* to its handler and return the handler's response."""
        match = self.match(request.method, request.path)
        handler = self.resolve_handler(match.route)
        return await invoke(handler, request.with_path_params(match.path_params))
