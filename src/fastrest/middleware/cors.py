"""CORS middleware.

Answers every ``OPTIONS`` request with a 204 preflight response and
adds CORS headers to all other responses.
"""

from dataclasses import dataclass

from fastrest.http.request import Request
from fastrest.http.response import Response
from fastrest.middleware.protocol import Next


@dataclass(frozen=True, slots=True)
class CORSConfig:
    """CORS middleware configuration.

    The defaults are permissive (any origin, the REST verbs, the usual
    API headers). Narrow them for production::

        CORSConfig(allow_origins=("https://shop.example.com",))
    """

    allow_origins: tuple[str, ...] = ("*",)
    allow_methods: tuple[str, ...] = ("GET", "POST", "PUT", "PATCH", "DELETE", "OPTIONS")
    allow_headers: tuple[str, ...] = ("Content-Type", "Authorization", "X-Requested-With")
    expose_headers: tuple[str, ...] = ()
    allow_credentials: bool = False
    max_age: int = 3600


class CORSMiddleware:
    """Cross-Origin Resource Sharing middleware.

    Handles:
    - Preflight ``OPTIONS`` requests: short-circuits with 204, the
      handler chain never runs
    - Actual requests: CORS headers added to the handler's response
    - Wildcard origins (``"*"``) when credentials are disabled; otherwise
      the request origin is echoed back with ``Vary: Origin``

    Usage::

        app.add_middleware(CORSMiddleware(CORSConfig(allow_origins=("https://example.com",))))
    """

    __slots__ = ("config",)

    def __init__(self, config: CORSConfig | None = None) -> None:
        self.config = config or CORSConfig()

    def _allowed_origin(self, origin: str | None) -> str | None:
        """The value for ``Access-Control-Allow-Origin``, or None to omit CORS headers."""
        cfg = self.config
        if "*" in cfg.allow_origins and not cfg.allow_credentials:
            return "*"
        if origin is not None and ("*" in cfg.allow_origins or origin in cfg.allow_origins):
            return origin
        return None

    def _add_cors_headers(self, response: Response, origin: str | None) -> Response:
        cfg = self.config
        allowed = self._allowed_origin(origin)
        if allowed is None:
            return response

        response = response.with_header("Access-Control-Allow-Origin", allowed)
        if allowed != "*":
            response = response.with_header("Vary", "Origin")
        if cfg.allow_credentials:
            response = response.with_header("Access-Control-Allow-Credentials", "true")
        if cfg.expose_headers:
            response = response.with_header(
                "Access-Control-Expose-Headers", ", ".join(cfg.expose_headers)
            )
        return (
            response.with_header("Access-Control-Allow-Methods", ", ".join(cfg.allow_methods))
            .with_header("Access-Control-Allow-Headers", ", ".join(cfg.allow_headers))
            .with_header("Access-Control-Max-Age", str(cfg.max_age))
        )

    async def __call__(self, request: Request, next: Next) -> Response:
        origin = request.headers.get("origin")

        if request.method == "OPTIONS":
            return self._add_cors_headers(Response(body=b"", status=204), origin)

        response = await next(request)
        return self._add_cors_headers(response, origin)
