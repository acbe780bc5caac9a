"""Migus application class.

Mutable during setup (route registration, middleware, hooks).
Frozen at runtime when ``app.run()``, ``app.dispatch()`` or
``__call__()`` is first invoked.
"""

import inspect
import logging
import threading
from collections.abc import Callable
from pathlib import Path
from typing import Any

from migus.auth import AuthConfig, Authenticator
from migus.config import AppConfig
from migus.data.database import Database
from migus.data.schema import create_schema
from migus.data.services import SessionService, UserService
from migus.dispatch import Dispatcher
from migus.http.response import Response
from migus.middleware.auth import admin_required, auth_required, guest_only
from migus.middleware.chain import Middleware, MiddlewareRegistry
from migus.middleware.csrf import csrf
from migus.routing.builder import RouteBuilder
from migus.routing.table import RouteTable
from migus.server.asgi import Receive, Scope, Send, handle_http
from migus.sessions import SessionConfig, SessionStore
from migus.view import View

logger = logging.getLogger("migus.server")


class App:
    """The migus application.

    Routes are registered through ``app.router``, a ``RouteBuilder``::

        app = App(AppConfig(secret_key="s3cr3t"))
        app.router.get("/", "HomeController@index")
        app.router.middleware("auth").get("/dashboard", "DashboardController@index")

    The built-in middleware ``csrf``, ``auth``, ``guest`` and ``admin``
    are registered by name; add your own with ``register_middleware``.

    Thread safety:
        The setup phase is single-threaded. The freeze transition uses
        a Lock + double-check so exactly one thread compiles the app,
        even when several ASGI workers hit the first request at once.
    """

    __slots__ = (
        "_authenticator",
        "_db",
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_registry",
        "_sessions",
        "_shutdown_hooks",
        "_startup_hooks",
        "_table",
        "_users",
        "_view",
        "config",
        "router",
    )

    def __init__(self, config: AppConfig | None = None, *, db: Database | str | None = None) -> None:
        self.config: AppConfig = config or AppConfig()
        cfg = self.config

        self._table = RouteTable()
        self.router = RouteBuilder(self._table, namespace=cfg.controller_namespace)
        self._registry = MiddlewareRegistry(strict=cfg.strict_middleware)
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._frozen = False
        self._freeze_lock = threading.Lock()

        # Database: an instance, a URL, or the configured URL.
        if db is None and cfg.database_url:
            db = cfg.database_url
        if isinstance(db, str):
            db = Database(db, echo=cfg.database_echo)
        self._db: Database | None = db
        self._users: UserService | None = UserService(db) if db is not None else None

        self._sessions: SessionStore | None = None
        if cfg.secret_key:
            self._sessions = SessionStore(
                SessionConfig(
                    secret_key=cfg.secret_key,
                    cookie_name=cfg.session_cookie,
                    max_age=cfg.session_max_age,
                    secure=cfg.session_secure,
                )
            )

        self._authenticator = Authenticator(
            SessionService(db) if db is not None else None,
            AuthConfig(
                cookie_name=cfg.auth_cookie,
                token_days=cfg.auth_token_days,
                secure=cfg.session_secure,
                login_url=cfg.login_url,
                home_url=cfg.home_url,
            ),
        )

        self._registry.register("csrf", csrf)
        self._registry.register("auth", auth_required(self._authenticator))
        self._registry.register("guest", guest_only(self._authenticator))
        self._registry.register("admin", admin_required(self._authenticator))

        # Compiled state, set during _freeze()
        self._view: View | None = None
        self._dispatcher: Dispatcher | None = None

    # -- Setup --

    def register_middleware(self, name: str, middleware: Middleware) -> None:
        """Make *middleware* available to routes under *name*."""
        self._check_not_frozen()
        self._registry.register(name, middleware)

    def middleware(self, name: str) -> Callable[[Middleware], Middleware]:
        """Decorator form of ``register_middleware``.

        Usage::

            @app.middleware("timing")
            def timing(ctx, next):
                start = time.perf_counter()
                next()
                ctx.response.header("X-Elapsed", f"{time.perf_counter() - start:.4f}")
        """

        def decorator(func: Middleware) -> Middleware:
            self.register_middleware(name, func)
            return func

        return decorator

    def load_routes(self, routes_dir: str | Path | None = None) -> list[Path]:
        """Load every route file under *routes_dir* (default: ``config.routes_dir``)."""
        from migus.providers import load_route_files

        self._check_not_frozen()
        return load_route_files(self.router, routes_dir or self.config.routes_dir)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync startup hook via decorator.

        Hooks run in registration order during ASGI lifespan startup,
        after the database is connected.
        """
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register an async or sync shutdown hook via decorator."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Accessors --

    @property
    def table(self) -> RouteTable:
        return self._table

    @property
    def registry(self) -> MiddlewareRegistry:
        return self._registry

    @property
    def authenticator(self) -> Authenticator:
        return self._authenticator

    @property
    def db(self) -> Database:
        """The configured database.

        Raises ``LookupError`` when the app has none.
        """
        if self._db is None:
            msg = "No database configured. Pass db= to App() or set database_url."
            raise LookupError(msg)
        return self._db

    @property
    def users(self) -> UserService:
        if self._users is None:
            msg = "No database configured. Pass db= to App() or set database_url."
            raise LookupError(msg)
        return self._users

    @property
    def view(self) -> View | None:
        self._ensure_frozen()
        return self._view

    def url_for(self, name: str, params: dict[str, Any] | None = None, /, **kwargs: Any) -> str:
        return self._table.url_for(name, params, **kwargs)

    # -- Dispatch --

    def dispatch(self, uri: str, method: str = "GET", **kwargs: Any) -> Response:
        """Dispatch one request synchronously and return the flushed response.

        Accepts the keyword arguments of ``Dispatcher.dispatch``.
        """
        self._ensure_frozen()
        assert self._dispatcher is not None
        return self._dispatcher.dispatch(uri, method, **kwargs)

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Start the pounce development server."""
        self._ensure_frozen()
        from migus.server.dev import run_dev_server

        run_dev_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
            reload_dirs=self.config.reload_dirs,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(scope, receive, send)
            return

        self._ensure_frozen()
        assert self._dispatcher is not None
        await handle_http(scope, receive, send, dispatcher=self._dispatcher, debug=self.config.debug)

    async def _handle_lifespan(self, scope: Scope, receive: Receive, send: Send) -> None:
        """Run the ASGI lifespan protocol.

        Freezes the app, connects the database and creates the schema
        at startup, then runs the registered hooks.
        """
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    if self._db is not None:
                        self._db.connect()
                        create_schema(self._db)
                    for hook in self._startup_hooks:
                        result = hook()
                        if inspect.isawaitable(result):
                            await result
                    await send({"type": "lifespan.startup.complete"})
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return

            elif msg_type == "lifespan.shutdown":
                for hook in self._shutdown_hooks:
                    result = hook()
                    if inspect.isawaitable(result):
                        await result
                if self._db is not None:
                    self._db.close()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        """Thread-safe freeze with double-check locking."""
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
        for route in self._table:
            self._registry.check(route.middleware, where=f"{route.method} {route.path}")
        self._table.freeze()

        if Path(self.config.template_dir).is_dir():
            self._view = View.from_config(self.config, url_for=self._table.url_for)
        else:
            logger.debug("Template directory %s not found; views disabled", self.config.template_dir)

        if self._sessions is None:
            logger.warning("No secret_key configured; sessions will not persist between requests")

        self._dispatcher = Dispatcher(
            self._table,
            self._registry,
            sessions=self._sessions,
            authenticator=self._authenticator,
            view=self._view,
            not_found_template=self.config.not_found_template,
        )
        self._frozen = True
        logger.debug("App frozen with %d routes", len(self._table))

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register routes and middleware before calling app.run()."
            )
            raise RuntimeError(msg)
