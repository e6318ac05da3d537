"""Handler lookup for routes registered by key.

Routes may name their handler with a string (``"products.show"``)
instead of passing the callable. The router then asks its
``HandlerResolver`` for the handler at dispatch time, so controllers can
be wired after the route table is written (e.g. once a database exists).
"""

from collections.abc import Callable
from typing import Any, Protocol

from fastrest.errors import ConfigurationError


class HandlerResolver(Protocol):
    """Anything that turns a handler key into a ``(request) -> response`` callable."""

    def resolve(self, key: str) -> Callable[..., Any]: ...


class HandlerRegistry:
    """Dict-backed ``HandlerResolver``.

    Usage::

        registry = HandlerRegistry()
        registry.register("products.index", controller.index)
        router = Router(resolver=registry)
        router.get("/products", "products.index")

    Factories registered with ``register_factory`` are called once, on
    first lookup, and the result is cached.
    """

    __slots__ = ("_factories", "_handlers")

    def __init__(self) -> None:
        self._handlers: dict[str, Callable[..., Any]] = {}
        self._factories: dict[str, Callable[[], Callable[..., Any]]] = {}

    def register(self, key: str, handler: Callable[..., Any]) -> None:
        self._handlers[key] = handler

    def register_factory(self, key: str, factory: Callable[[], Callable[..., Any]]) -> None:
        self._factories[key] = factory

    def __contains__(self, key: object) -> bool:
        return key in self._handlers or key in self._factories

    def resolve(self, key: str) -> Callable[..., Any]:
        handler = self._handlers.get(key)
        if handler is not None:
            return handler
        factory = self._factories.get(key)
        if factory is None:
            msg = f"No handler registered for key {key!r}."
            raise ConfigurationError(msg)
        handler = factory()
        self._handlers[key] = handler
        return handler
