"""fastrest: a minimal async REST framework.

Verb-aware routing, a middleware pipeline that turns ``HTTPError`` into a
JSON envelope, and a parameterized SQL CRUD helper with a fluent query
builder.

Basic usage::

    from fastrest import App, json_response

    app = App()

    @app.get("/ping")
    def ping(request):
        return json_response({"status": "success", "data": "pong"})

    app.run()

Data access::

    from fastrest.data import Database, QueryBuilder
    db = Database("sqlite:///app.db")
    rows = await QueryBuilder("products").where("price", "<", 30).execute(db)
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "BadRequest",
    "ConfigurationError",
    "FastRestError",
    "HTTPError",
    "InternalServerError",
    "MethodNotAllowed",
    "Middleware",
    "MiddlewarePipeline",
    "Next",
    "NotFound",
    "Request",
    "Response",
    "Router",
    "UnprocessableEntity",
    "error_response",
    "json_response",
    "no_content",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import fastrest`` fast while providing a clean top-level API.
    """
    if name == "App":
        from fastrest.app import App

        return App

    if name == "AppConfig":
        from fastrest.config import AppConfig

        return AppConfig

    if name == "Request":
        from fastrest.http.request import Request

        return Request

    if name in ("Response", "error_response", "json_response", "no_content"):
        from fastrest.http import response as _resp

        return getattr(_resp, name)

    if name in ("Middleware", "Next"):
        from fastrest.middleware import protocol as _mw

        return getattr(_mw, name)

    if name == "MiddlewarePipeline":
        from fastrest.middleware.pipeline import MiddlewarePipeline

        return MiddlewarePipeline

    if name == "Router":
        from fastrest.routing.router import Router

        return Router

    if name in (
        "BadRequest",
        "ConfigurationError",
        "FastRestError",
        "HTTPError",
        "InternalServerError",
        "MethodNotAllowed",
        "NotFound",
        "UnprocessableEntity",
    ):
        from fastrest import errors as _errors

        return getattr(_errors, name)

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
