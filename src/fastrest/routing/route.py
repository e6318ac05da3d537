"""Route, path segment and match-result frozen dataclasses."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

METHODS: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE")

# A handler is either the callable itself or a key for a HandlerResolver.
HandlerRef: TypeAlias = Callable[..., Any] | str


@dataclass(frozen=True, slots=True)
class PathSegment:
    """A parsed segment of a route pattern.

    Static: ``products``  (is_param=False)
    Param:  ``{id}``      (is_param=True, param_name="id")
    """

    value: str
    is_param: bool = False
    param_name: str | None = None


@dataclass(frozen=True, slots=True)
class Route:
    """A registered (method, pattern) → handler mapping."""

    method: str
    path: str
    handler: HandlerRef


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """The path shape and the verb both matched."""

    route: Route
    path_params: Mapping[str, str]


@dataclass(frozen=True, slots=True)
class MethodMismatch:
    """The path shape matched but the pattern has no route for the verb."""

    path: str
    allowed: frozenset[str]


@dataclass(frozen=True, slots=True)
class NoMatch:
    """No registered pattern has the shape of the request path."""

    path: str


MatchResult: TypeAlias = RouteMatch | MethodMismatch | NoMatch
