"""Tests for fastrest.middleware.cors."""

from fastrest.http.request import Request
from fastrest.http.response import Response, json_response
from fastrest.middleware.cors import CORSConfig, CORSMiddleware


async def _ok(request: Request) -> Response:
    return json_response({"ok": True})


def _request(method: str = "GET", origin: str | None = "https://shop.example.com") -> Request:
    headers = {"Origin": origin} if origin else {}
    return Request.build(method, "/products", headers=headers)


class TestPreflight:
    async def test_options_short_circuits(self) -> None:
        called = []

        async def handler(request):
            called.append(request)
            return json_response({})

        response = await CORSMiddleware()(_request("OPTIONS"), handler)
        assert response.status == 204
        assert response.body == b""
        assert called == []

    async def test_preflight_headers(self) -> None:
        response = await CORSMiddleware()(_request("OPTIONS"), _ok)
        assert response.header("Access-Control-Allow-Origin") == "*"
        assert response.header("Access-Control-Allow-Methods") == (
            "GET, POST, PUT, PATCH, DELETE, OPTIONS"
        )
        assert response.header("Access-Control-Allow-Headers") == (
            "Content-Type, Authorization, X-Requested-With"
        )
        assert response.header("Access-Control-Max-Age") == "3600"


class TestActualRequests:
    async def test_wildcard(self) -> None:
        response = await CORSMiddleware()(_request(), _ok)
        assert response.status == 200
        assert response.header("Access-Control-Allow-Origin") == "*"
        assert response.header("Vary") is None

    async def test_wildcard_without_origin_header(self) -> None:
        response = await CORSMiddleware()(_request(origin=None), _ok)
        assert response.header("Access-Control-Allow-Origin") == "*"

    async def test_allowed_origin_echoed(self) -> None:
        mw = CORSMiddleware(CORSConfig(allow_origins=("https://shop.example.com",)))
        response = await mw(_request(), _ok)
        assert response.header("Access-Control-Allow-Origin") == "https://shop.example.com"
        assert response.header("Vary") == "Origin"

    async def test_disallowed_origin_gets_no_headers(self) -> None:
        mw = CORSMiddleware(CORSConfig(allow_origins=("https://shop.example.com",)))
        response = await mw(_request(origin="https://evil.example.com"), _ok)
        assert response.header("Access-Control-Allow-Origin") is None
        assert response.header("Access-Control-Allow-Methods") is None

    async def test_credentials_echo_origin(self) -> None:
        mw = CORSMiddleware(CORSConfig(allow_credentials=True))
        response = await mw(_request(), _ok)
        assert response.header("Access-Control-Allow-Origin") == "https://shop.example.com"
        assert response.header("Access-Control-Allow-Credentials") == "true"

    async def test_credentials_without_origin(self) -> None:
        mw = CORSMiddleware(CORSConfig(allow_credentials=True))
        response = await mw(_request(origin=None), _ok)
        assert response.header("Access-Control-Allow-Origin") is None

    async def test_expose_headers(self) -> None:
        mw = CORSMiddleware(CORSConfig(expose_headers=("X-Total-Count",)))
        response = await mw(_request(), _ok)
        assert response.header("Access-Control-Expose-Headers") == "X-Total-Count"

    async def test_custom_max_age(self) -> None:
        mw = CORSMiddleware(CORSConfig(max_age=60))
        response = await mw(_request(), _ok)
        assert response.header("Access-Control-Max-Age") == "60"

    async def test_handler_headers_kept(self) -> None:
        async def handler(request):
            return json_response({}).with_header("X-Total-Count", "3")

        response = await CORSMiddleware()(_request(), handler)
        assert response.header("X-Total-Count") == "3"
        assert response.header("Cache-Control") == "no-store, no-cache, must-revalidate"
