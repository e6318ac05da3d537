"""Middleware pipeline with HTTP-error-to-JSON conversion.

Stages run in FIFO order; the last one must be a terminal handler
(typically the ``Router``)::

    pipeline = MiddlewarePipeline([
        RequestLogger(),
        CORSMiddleware(),
        JSONBodyParser(),
        router,
    ])
    response = await pipeline.handle(request)

The continuation chain is folded once, at construction. Each request
only threads itself through the prebuilt closures.
"""

import json as json_module
import logging
from collections.abc import Sequence
from typing import Any

from fastrest.errors import ConfigurationError, HTTPError
from fastrest.http.request import Request
from fastrest.http.response import Response
from fastrest.middleware.protocol import Next, RequestHandler

logger = logging.getLogger("fastrest.server")


def http_error_response(exc: HTTPError) -> Response:
    """Render an ``HTTPError`` as the JSON error envelope."""
    body = json_module.dumps(
        {"status": "error", "code": exc.status, "message": exc.detail},
        ensure_ascii=False,
    )
    response = Response(body=body, status=exc.status, content_type="application/json")
    for name, value in exc.headers:
        response = response.with_header(name, value)
    return response


def _bind(middleware: Any, nxt: Next) -> Next:
    async def stage(request: Request) -> Response:
        return await middleware(request, nxt)

    return stage


class MiddlewarePipeline:
    """An ordered, immutable chain of middleware ending in a terminal handler.

    Raises ``ConfigurationError`` at construction if the sequence is
    empty, if the last stage has no ``handle`` method, or if an earlier
    stage is not callable.

    An ``HTTPError`` raised anywhere in the chain (terminal handler
    included) unwinds straight to ``handle()`` and is converted there,
    exactly once. Middleware between the raise site and the boundary do
    not see the converted response. Any other exception propagates.
    """

    __slots__ = ("_chain", "_stages")

    def __init__(self, stages: Sequence[Any]) -> None:
        if not stages:
            msg = "MiddlewarePipeline needs at least a terminal handler."
            raise ConfigurationError(msg)
        *middleware, terminal = stages
        if not isinstance(terminal, RequestHandler):
            msg = (
                f"The last pipeline stage must be a terminal handler with "
                f"'async handle(request)', got {type(terminal).__name__}."
            )
            raise ConfigurationError(msg)
        for mw in middleware:
            if not callable(mw):
                msg = f"Middleware {mw!r} is not callable."
                raise ConfigurationError(msg)

        self._stages: tuple[Any, ...] = tuple(stages)

        chain: Next = terminal.handle
        for mw in reversed(middleware):
            chain = _bind(mw, chain)
        self._chain = chain

    @property
    def stages(self) -> tuple[Any, ...]:
        return self._stages

    async def handle(self, request: Request) -> Response:
        try:
            return await self._chain(request)
        except HTTPError as exc:
            logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
            return http_error_response(exc)
