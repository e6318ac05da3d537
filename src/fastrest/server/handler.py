"""ASGI handler: translates ASGI scope/messages to fastrest types.

The only component that touches raw ASGI HTTP messages directly. Converts
the scope to a typed Request, dispatches it through the middleware
pipeline and sends the Response back through ASGI ``send()``.
"""

import json as json_module
import logging
from contextvars import Token
from typing import Any

from fastrest._internal.asgi import Receive, Scope, Send
from fastrest.http.request import Request
from fastrest.http.response import Response
from fastrest.middleware.pipeline import MiddlewarePipeline
from fastrest.server.sender import send_response

logger = logging.getLogger("fastrest.server")


def internal_error_response(exc: Exception, *, debug: bool = False) -> Response:
    """The 500 envelope for an exception nothing else handled.

    The exception text is only exposed in debug mode.
    """
    message = f"{type(exc).__name__}: {exc}" if debug else "Internal Server Error"
    body = json_module.dumps({"status": "error", "code": 500, "message": message})
    return Response(body=body, status=500, content_type="application/json")


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    pipeline: MiddlewarePipeline,
    debug: bool = False,
    db: Any = None,
) -> None:
    """Process a single HTTP request through the pipeline."""
    if scope["type"] != "http":
        return

    request = Request.from_asgi(scope, receive)

    # Set database context var per-request (startup hooks see it only while they run)
    db_token: Token[Any] | None = None
    if db is not None:
        from fastrest.data.database import _db_var

        db_token = _db_var.set(db)

    try:
        response = await pipeline.handle(request)
    except Exception as exc:
        # HTTPError never gets here: the pipeline converts it
        logger.exception(
            "500 %s %s",
            request.method,
            request.path,
            extra={"context": {"method": request.method, "uri": request.path}},
        )
        response = internal_error_response(exc, debug=debug)
    finally:
        if db_token is not None:
            from fastrest.data.database import _db_var

            _db_var.reset(db_token)

    await send_response(response, send)
