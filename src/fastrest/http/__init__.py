"""HTTP primitives: Request, Response, Headers, QueryParams."""

from fastrest.http.headers import Headers
from fastrest.http.query import QueryParams
from fastrest.http.request import Request
from fastrest.http.response import Response, error_response, json_response, no_content

__all__ = [
    "Headers",
    "QueryParams",
    "Request",
    "Response",
    "error_response",
    "json_response",
    "no_content",
]
