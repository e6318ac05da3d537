"""fastrest application class.

Mutable during setup (route registration, middleware, handler keys,
lifecycle hooks). Frozen at runtime when ``app.run()`` or ``__call__()``
is first invoked: the router is compiled and the middleware pipeline is
folded once.
"""

from __future__ import annotations

import threading
from collections.abc import Callable, Iterator, Sequence
from contextlib import contextmanager
from typing import TYPE_CHECKING, Any, TypeAlias

from fastrest._internal.asgi import Receive, Scope, Send
from fastrest._internal.invoke import invoke
from fastrest.config import AppConfig
from fastrest.errors import ConfigurationError
from fastrest.middleware.body import JSONBodyParser
from fastrest.middleware.cors import CORSConfig, CORSMiddleware
from fastrest.middleware.pipeline import MiddlewarePipeline
from fastrest.middleware.protocol import Middleware
from fastrest.middleware.request_logger import RequestLogger
from fastrest.routing.registry import HandlerRegistry
from fastrest.routing.route import HandlerRef
from fastrest.routing.router import Router
from fastrest.server.handler import handle_request

if TYPE_CHECKING:
    from fastrest.data.database import Database

Handler: TypeAlias = Callable[..., Any]


def default_middleware(config: AppConfig) -> list[Middleware]:
    """Request logging, then CORS, then JSON body parsing."""
    cors = CORSConfig(
        allow_origins=config.cors_allow_origins,
        allow_methods=config.cors_allow_methods,
        allow_headers=config.cors_allow_headers,
        max_age=config.cors_max_age,
    )
    return [RequestLogger(), CORSMiddleware(cors), JSONBodyParser()]


class App:
    """The fastrest application.

    Usage::

        app = App(AppConfig(debug=True), db="sqlite:///shop.db")

        @app.get("/products/{id}")
        async def show(request):
            rows = await app.db.select("products", where={"id": request.param("id")})
            if not rows:
                raise NotFound("Product not found")
            return json_response({"status": "success", "data": rows[0]})

        app.run()

    Handlers may also be registered by key and wired later through the
    handler registry::

        app.get("/products", "products.index")
        app.provide("products.index", controller.index)

    ``middleware=None`` installs ``default_middleware(config)``; pass an
    explicit sequence (possibly empty) to replace it. ``add_middleware``
    appends after whichever list was chosen.

    Thread safety:
        The setup phase is single-threaded (decorators at import time).
        The freeze transition uses a Lock + double-check so exactly one
        thread compiles the app.
    """

    __slots__ = (
        "_db",
        "_freeze_lock",
        "_frozen",
        "_middleware_list",
        "_pipeline",
        "_registry",
        "_router",
        "_shutdown_hooks",
        "_startup_hooks",
        "config",
    )

    def __init__(
        self,
        config: AppConfig | None = None,
        *,
        db: Database | str | None = None,
        middleware: Sequence[Middleware] | None = None,
    ) -> None:
        self.config: AppConfig = config or AppConfig()
        self._registry = HandlerRegistry()
        self._router = Router(resolver=self._registry)
        self._middleware_list: list[Middleware] = (
            default_middleware(self.config) if middleware is None else list(middleware)
        )
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._pipeline: MiddlewarePipeline | None = None
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Database: accepts a Database instance or a connection URL string.
        # Falls back to config.db_url. Connected and disconnected by lifespan.
        if db is None:
            db = self.config.db_url
        if isinstance(db, str):
            from fastrest.data.database import Database as _Database

            self._db: Database | None = _Database(db, echo=self.config.db_echo)
        else:
            self._db = db

    # -- Route registration --

    def add_route(self, method: str, path: str, handler: HandlerRef) -> None:
        """Register *handler* (a callable or a registry key) for *method* and *path*."""
        self._check_not_frozen()
        self._router.add(method, path, handler)

    def route(
        self,
        path: str,
        *,
        methods: list[str] | None = None,
    ) -> Callable[[Handler], Handler]:
        """Register a route handler via decorator.

        Args:
            path: URL path pattern. Use ``{param}`` for path parameters.
            methods: HTTP methods. Defaults to ``["GET"]``.
        """

        def decorator(func: Handler) -> Handler:
            for method in methods or ["GET"]:
                self.add_route(method, path, func)
            return func

        return decorator

    def get(self, path: str, handler: HandlerRef | None = None) -> Any:
        """``@app.get(path)`` decorator, or ``app.get(path, handler)`` directly."""
        return self._verb("GET", path, handler)

    def post(self, path: str, handler: HandlerRef | None = None) -> Any:
        return self._verb("POST", path, handler)

    def put(self, path: str, handler: HandlerRef | None = None) -> Any:
        return self._verb("PUT", path, handler)

    def patch(self, path: str, handler: HandlerRef | None = None) -> Any:
        return self._verb("PATCH", path, handler)

    def delete(self, path: str, handler: HandlerRef | None = None) -> Any:
        return self._verb("DELETE", path, handler)

    def _verb(self, method: str, path: str, handler: HandlerRef | None) -> Any:
        if handler is not None:
            self.add_route(method, path, handler)
            return handler
        return self.route(path, methods=[method])

    @property
    def router(self) -> Router:
        return self._router

    # -- Handler registry --

    def provide(self, key: str, handler: Handler) -> None:
        """Bind a handler key used in route registration to a callable."""
        self._registry.register(key, handler)

    def provide_factory(self, key: str, factory: Callable[[], Handler]) -> None:
        """Like ``provide``, but the handler is built on first dispatch."""
        self._registry.register_factory(key, factory)

    @property
    def registry(self) -> HandlerRegistry:
        return self._registry

    # -- Database --

    @property
    def db(self) -> Database:
        """The database instance, if configured.

        Raises ``RuntimeError`` if no database was configured on this app.
        """
        if self._db is None:
            msg = (
                "No database configured. Pass db= to App(), set DATABASE_URL, "
                "or use Database directly: from fastrest.data import Database"
            )
            raise RuntimeError(msg)
        return self._db

    # -- Middleware --

    def add_middleware(self, middleware: Middleware) -> None:
        """Append a middleware to the pipeline (before the router)."""
        self._check_not_frozen()
        if not callable(middleware):
            msg = f"Middleware {middleware!r} is not callable."
            raise ConfigurationError(msg)
        self._middleware_list.append(middleware)

    @property
    def pipeline(self) -> MiddlewarePipeline:
        """The compiled pipeline. Freezes the app on first access."""
        self._ensure_frozen()
        assert self._pipeline is not None
        return self._pipeline

    # -- Lifecycle hooks --

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after the database (if any) has connected.

        Usage::

            @app.on_startup
            async def schema():
                await app.db.query(CREATE_PRODUCTS)
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator.

        Hooks run in registration order during ASGI lifespan shutdown,
        before the database disconnects.
        """
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with uvicorn.

        Compiles the app (freezing routes and middleware) and blocks until
        the server stops.
        """
        import uvicorn

        self._ensure_frozen()
        uvicorn.run(
            self,
            host=host or self.config.host,
            port=port or self.config.port,
            log_level=self.config.log_level,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point.

        Handles the lifespan scope directly, then delegates HTTP scopes to
        the request handler.
        """
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._pipeline is not None

        await handle_request(
            scope,
            receive,
            send,
            pipeline=self._pipeline,
            debug=self.config.debug,
            db=self._db,
        )

    async def startup(self) -> None:
        """Connect the database and run the startup hooks."""
        self._ensure_frozen()
        if self._db is not None:
            await self._db.connect()
        with self._db_context():
            for hook in self._startup_hooks:
                await invoke(hook)

    async def shutdown(self) -> None:
        """Run the shutdown hooks, then disconnect the database."""
        with self._db_context():
            for hook in self._shutdown_hooks:
                await invoke(hook)
        if self._db is not None:
            await self._db.disconnect()

    @contextmanager
    def _db_context(self) -> Iterator[None]:
        """Make ``get_db()`` resolve to this app's database inside hooks."""
        if self._db is None:
            yield
            return
        from fastrest.data.database import _db_var

        token = _db_var.set(self._db)
        try:
            yield
        finally:
            _db_var.reset(token)

    async def _handle_lifespan(
        self,
        scope: Scope,
        receive: Receive,
        send: Send,
    ) -> None:
        """Run the ASGI lifespan protocol."""
        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    await send(
                        {
                            "type": "lifespan.startup.failed",
                            "message": str(exc),
                        }
                    )
                    return

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """Compile the app into its frozen runtime state.

        MUST only be called while holding _freeze_lock.
        """
        self._router.compile()
        self._pipeline = MiddlewarePipeline([*self._middleware_list, self._router])
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes, middleware and hooks before calling app.run()."
            )
            raise ConfigurationError(msg)
