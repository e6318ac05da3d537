"""Request/response logging middleware."""

import logging
import time

from fastrest.http.request import Request
from fastrest.http.response import Response
from fastrest.middleware.protocol import Next

logger = logging.getLogger("fastrest.request")

_ESCAPES = str.maketrans({"\n": "\\n", "\r": "\\r", "\t": "\\t"})


def sanitize(value: str) -> str:
    """Escape the characters used for log injection."""
    return value.translate(_ESCAPES)


def client_ip(request: Request) -> str:
    """First ``X-Forwarded-For`` hop, else the socket peer, else ``"unknown"``."""
    forwarded = request.headers.get("x-forwarded-for")
    if forwarded:
        return forwarded.split(",")[0].strip()
    if request.client is not None:
        return request.client[0]
    return "unknown"


class RequestLogger:
    """Log every incoming request and its outgoing response.

    Emits two INFO records per request on the ``fastrest.request``
    logger, with the details in the structured ``context`` extra.
    Responses produced from an ``HTTPError`` are converted at the
    pipeline boundary and are not seen here.
    """

    __slots__ = ("logger",)

    def __init__(self, log: logging.Logger | None = None) -> None:
        self.logger = log or logger

    async def __call__(self, request: Request, next: Next) -> Response:
        start = time.perf_counter()
        self.logger.info(
            "Request",
            extra={
                "context": {
                    "method": request.method,
                    "uri": sanitize(request.url),
                    "ip": sanitize(client_ip(request)),
                }
            },
        )

        response = await next(request)

        elapsed_ms = (time.perf_counter() - start) * 1000
        self.logger.info(
            "Response",
            extra={"context": {"status": response.status, "duration": f"{elapsed_ms:.2f}ms"}},
        )
        return response
