"""ASGI server adapter."""

from fastrest.server.handler import handle_request, internal_error_response
from fastrest.server.sender import send_response

__all__ = ["handle_request", "internal_error_response", "send_response"]
