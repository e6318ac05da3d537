"""Routing — ordered, verb-aware route table.

Routes are registered during setup and frozen when the app compiles.
"""

from fastrest.routing.registry import HandlerRegistry, HandlerResolver
from fastrest.routing.route import MatchResult, MethodMismatch, NoMatch, Route, RouteMatch
from fastrest.routing.router import Router

__all__ = [
    "HandlerRegistry",
    "HandlerResolver",
    "MatchResult",
    "MethodMismatch",
    "NoMatch",
    "Route",
    "RouteMatch",
    "Router",
]
