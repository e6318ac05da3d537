"""Middleware — Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Built-in middleware:
    CORSMiddleware -- Cross-Origin Resource Sharing + preflight short-circuit
    JSONBodyParser -- Parse application/json bodies into request.parsed_body
    RequestLogger -- Log requests and responses with sanitized values
"""

from fastrest.middleware.body import JSONBodyParser
from fastrest.middleware.cors import CORSConfig, CORSMiddleware
from fastrest.middleware.pipeline import MiddlewarePipeline, http_error_response
from fastrest.middleware.protocol import Middleware, Next, RequestHandler
from fastrest.middleware.request_logger import RequestLogger

__all__ = [
    "CORSConfig",
    "CORSMiddleware",
    "JSONBodyParser",
    "Middleware",
    "MiddlewarePipeline",
    "Next",
    "RequestHandler",
    "RequestLogger",
    "http_error_response",
]
