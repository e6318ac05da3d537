"""Tests for fastrest.server.sender — Response to ASGI messages."""

from fastrest.http.response import Response, json_response, no_content
from fastrest.server.handler import internal_error_response
from fastrest.server.sender import raw_headers, send_response


async def _collect(response: Response) -> list[dict]:
    sent: list[dict] = []

    async def send(message):
        sent.append(message)

    await send_response(response, send)
    return sent


class TestSendResponse:
    async def test_json(self) -> None:
        start, body = await _collect(json_response({"a": 1}, status=201))
        assert start["type"] == "http.response.start"
        assert start["status"] == 201
        headers = dict(start["headers"])
        assert headers[b"content-type"] == b"application/json; charset=utf-8"
        assert headers[b"content-length"] == b"8"
        assert headers[b"cache-control"] == b"no-store, no-cache, must-revalidate"
        assert body == {"type": "http.response.body", "body": b'{"a": 1}'}

    async def test_no_content_has_no_body_or_type(self) -> None:
        start, body = await _collect(no_content())
        headers = dict(start["headers"])
        assert b"content-type" not in headers
        assert headers[b"content-length"] == b"0"
        assert body["body"] == b""

    async def test_utf8_length(self) -> None:
        start, _ = await _collect(Response("é"))
        assert dict(start["headers"])[b"content-length"] == b"2"

    def test_header_names_lowercased(self) -> None:
        headers = raw_headers(Response().with_header("X-Total-Count", "3"))
        assert (b"x-total-count", b"3") in headers


class TestInternalErrorResponse:
    def test_hidden(self) -> None:
        response = internal_error_response(KeyError("secret"))
        assert response.status == 500
        assert response.json()["message"] == "Internal Server Error"

    def test_debug(self) -> None:
        response = internal_error_response(ValueError("bad"), debug=True)
        assert response.json()["message"] == "ValueError: bad"
