"""Route registration: prefixes, groups, fluent middleware, and handles.

A ``RouteBuilder`` is a value describing *where* routes are being
registered: the table, the path prefix, the group middleware, and the
controller namespace. ``group()`` and ``prefix()`` return child builders
and never modify the parent, so leaving a group (normally or through an
exception) needs no cleanup::

    router.get("/", "HomeController@index")

    with router.group("/admin", middleware=["auth", "admin"]) as admin:
        admin.get("/users", "AdminUserController@index").name("admin.users")

    router.middleware("csrf").post("/login", "AuthController@post_login")

The fluent ``middleware()`` buffer applies to the next registration only
and is cleared afterwards, even when that registration fails.
"""

import logging
from collections.abc import Callable, Iterable, Mapping
from pathlib import Path
from types import TracebackType
from typing import Any

from migus.routing.binding import Binding
from migus.routing.compiler import compile_path, join_paths, normalize_path
from migus.routing.handlers import HandlerSpec, resolve_handler
from migus.routing.route import Route
from migus.routing.table import RouteTable

logger = logging.getLogger("migus.routing")


def auto_name(method: str, path: str) -> str:
    """Default route name: ``/admin/users`` -> ``admin.users``; ``/`` -> ``get.root``."""
    trimmed = path.strip("/")
    if not trimmed:
        return f"{method.lower()}.root"
    return trimmed.replace("/", ".")


def _flatten(names: Iterable[str | Iterable[str]]) -> list[str]:
    flat: list[str] = []
    for item in names:
        if isinstance(item, str):
            flat.append(item)
        else:
            flat.extend(item)
    return flat


def _unique(names: Iterable[str]) -> tuple[str, ...]:
    return tuple(dict.fromkeys(names))


class RouteHandle:
    """Post-registration access to one route, for chaining."""

    __slots__ = ("_table", "method", "path")

    def __init__(self, table: RouteTable, method: str, path: str) -> None:
        self._table = table
        self.method = method
        self.path = path

    def __repr__(self) -> str:
        return f"RouteHandle({self.method} {self.path})"

    @property
    def route(self) -> Route:
        return self._table._require(self.method, self.path)

    def middleware(self, *names: str | Iterable[str]) -> RouteHandle:
        """Append middleware names the route does not already have."""
        current = self.route.middleware
        self._table.update(self.method, self.path, middleware=_unique((*current, *_flatten(names))))
        return self

    def name(self, name: str) -> RouteHandle:
        """Name the route, taking the name over from any other route."""
        self._table.assign_name(self.method, self.path, name)
        return self


class RouteBuilder:
    """Registers routes into a ``RouteTable`` under a prefix and group middleware."""

    __slots__ = ("_middleware", "_namespace", "_pending", "_prefix", "_table")

    def __init__(
        self,
        table: RouteTable | None = None,
        *,
        prefix: str = "",
        middleware: Iterable[str] = (),
        namespace: str = "app.controllers",
    ) -> None:
        self._table = table if table is not None else RouteTable()
        self._prefix = normalize_path(prefix) if prefix.strip("/") else ""
        self._middleware = tuple(middleware)
        self._namespace = namespace
        self._pending: list[str] = []

    def __repr__(self) -> str:
        return f"RouteBuilder(prefix={self._prefix or '/'!r}, middleware={self._middleware!r})"

    @property
    def table(self) -> RouteTable:
        return self._table

    @property
    def current_prefix(self) -> str:
        return self._prefix

    @property
    def group_middleware(self) -> tuple[str, ...]:
        return self._middleware

    @property
    def namespace(self) -> str:
        return self._namespace

    # -- Registration --

    def add(
        self,
        method: str,
        path: str,
        handler: HandlerSpec,
        *,
        bind: Binding | None = None,
        name: str | None = None,
    ) -> RouteHandle:
        """Register *handler* for *method* and *path*."""
        try:
            return self._register(method, path, handler, bind, name, tuple(self._pending))
        finally:
            self._pending.clear()

    def get(self, path: str, handler: HandlerSpec, **kwargs: Any) -> RouteHandle:
        return self.add("GET", path, handler, **kwargs)

    def post(self, path: str, handler: HandlerSpec, **kwargs: Any) -> RouteHandle:
        return self.add("POST", path, handler, **kwargs)

    def put(self, path: str, handler: HandlerSpec, **kwargs: Any) -> RouteHandle:
        return self.add("PUT", path, handler, **kwargs)

    def patch(self, path: str, handler: HandlerSpec, **kwargs: Any) -> RouteHandle:
        return self.add("PATCH", path, handler, **kwargs)

    def delete(self, path: str, handler: HandlerSpec, **kwargs: Any) -> RouteHandle:
        return self.add("DELETE", path, handler, **kwargs)

    def route(
        self,
        methods: Iterable[str],
        path: str,
        handler: HandlerSpec,
        *,
        bind: Binding | None = None,
    ) -> list[RouteHandle]:
        """Register one handler for several methods; fluent middleware applies to all."""
        fluent = tuple(self._pending)
        try:
            return [self._register(m, path, handler, bind, None, fluent) for m in methods]
        finally:
            self._pending.clear()

    def _register(
        self,
        method: str,
        path: str,
        handler: HandlerSpec,
        bind: Binding | None,
        name: str | None,
        fluent: tuple[str, ...],
    ) -> RouteHandle:
        method = method.upper()
        full_path = join_paths(self._prefix, path)
        resolved = resolve_handler(handler, namespace=self._namespace, bind=bind)
        compiled = compile_path(full_path)
        route = self._table.add(
            Route(
                method=method,
                path=full_path,
                handler=resolved,
                middleware=(*self._middleware, *fluent),
                pattern=compiled.pattern,
                params=compiled.params,
            )
        )
        if name is not None:
            self._table.assign_name(method, full_path, name)
        elif route.name is None:
            self._table.assign_name(method, full_path, auto_name(method, full_path), explicit=False)
        logger.debug("Registered %s %s -> %s", method, full_path, resolved.describe())
        return RouteHandle(self._table, method, full_path)

    # -- Composition --

    def middleware(self, *names: str | Iterable[str]) -> RouteBuilder:
        """Queue middleware for the next registration.

        The queue follows a chained ``prefix()`` or ``group()`` into the child.
        """
        self._pending.extend(_flatten(names))
        return self

    def prefix(self, prefix: str) -> RouteBuilder:
        """A child builder whose routes live under *prefix*."""
        return self._child(prefix, ())

    def group(
        self,
        options: str | Mapping[str, Any],
        body: Callable[[RouteBuilder], Any] | None = None,
        *,
        middleware: str | Iterable[str] = (),
    ) -> RouteBuilder:
        """A child builder with an extended prefix and extra group middleware.

        *options* is a prefix string or a mapping with ``prefix`` and
        ``middleware`` keys. When *body* is given it is called with the
        child; the child is also returned, and works as a context manager.
        Group middleware is the parent's followed by the new names, with
        duplicates dropped.
        """
        if isinstance(options, str):
            group_prefix, extra = options, _flatten([middleware])
        else:
            group_prefix = str(options.get("prefix", ""))
            extra = [*_flatten([options.get("middleware", ())]), *_flatten([middleware])]
        child = self._child(group_prefix, extra)
        if body is not None:
            body(child)
        return child

    def group_file(self, options: str | Mapping[str, Any], path: str | Path) -> RouteBuilder:
        """Load a route file into a new group."""
        from migus.providers import load_route_file

        child = self.group(options)
        load_route_file(child, Path(path))
        return child

    def _child(self, prefix: str, extra: Iterable[str]) -> RouteBuilder:
        child = RouteBuilder(
            self._table,
            prefix=join_paths(self._prefix, prefix),
            middleware=_unique((*self._middleware, *extra)),
            namespace=self._namespace,
        )
        # Queued middleware moves to the child's next registration.
        child._pending.extend(self._pending)
        self._pending.clear()
        return child

    def __enter__(self) -> RouteBuilder:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self._pending.clear()

    # -- Reverse lookup --

    def url_for(self, name: str, params: Mapping[str, Any] | None = None, /, **kwargs: Any) -> str:
        return self._table.url_for(name, params, **kwargs)
