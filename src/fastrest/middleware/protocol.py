"""Middleware and terminal-handler protocols.

A middleware is any callable matching::

    async def my_mw(request: Request, next: Next) -> Response: ...

No base class required. The pipeline checks the shape, not the lineage.
A terminal handler is any object with ``async handle(request)``; the
``Router`` and the ``MiddlewarePipeline`` itself both qualify.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias, runtime_checkable

from fastrest.http.request import Request
from fastrest.http.response import Response

# The next stage in the middleware chain
Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    """Protocol for fastrest middleware.

    Accepts both functions and callable objects::

        # Function middleware
        async def timing(request: Request, next: Next) -> Response:
            start = time.monotonic()
            response = await next(request)
            return response.with_header("X-Time", f"{time.monotonic() - start:.3f}")

        # Class middleware
        class ApiKeyGuard:
            async def __call__(self, request: Request, next: Next) -> Response:
                ...
    """

    async def __call__(self, request: Request, next: Next) -> Response: ...


@runtime_checkable
class RequestHandler(Protocol):
    """The last stage of a pipeline: produces a response without delegating."""

    async def handle(self, request: Request) -> Response: ...
