"""JSON request body parsing middleware."""

import json as json_module

from fastrest.errors import BadRequest
from fastrest.http.request import Request
from fastrest.http.response import Response
from fastrest.middleware.protocol import Next


class JSONBodyParser:
    """Decode ``application/json`` bodies into ``request.parsed_body``.

    An empty body is left unparsed. A body that is present but not valid
    JSON raises ``BadRequest`` (400), which the pipeline turns into the
    standard error envelope.
    """

    __slots__ = ()

    async def __call__(self, request: Request, next: Next) -> Response:
        content_type = request.headers.get_line("content-type")
        if "application/json" in content_type.lower():
            raw = await request.body()
            if raw:
                try:
                    decoded = json_module.loads(raw)
                except (ValueError, UnicodeDecodeError) as exc:
                    raise BadRequest(f"Invalid JSON body: {exc}") from exc
                request = request.with_parsed_body(decoded)
        return await next(request)
