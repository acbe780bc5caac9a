"""Request dispatch: match, bind, run the middleware chain, flush once.

``Dispatcher.dispatch()`` is the whole request pipeline in synchronous
form. For each call it:

1. Splits the query string off the URI and trims the trailing slash.
2. Resolves the effective method (``_method`` override on POST).
3. Builds the ``Request``, the ``Response`` and the ``DispatchContext``.
4. Looks the route up; a miss answers 404 with nothing else run.
5. Binds handler arguments from the route's declared signature.
6. Runs the route's middleware chain around the handler.
7. Flushes the response, unless a middleware already did.

Everything a handler or middleware needs travels on the context: the
session, flash messages, the CSRF token and the current user. There is
no global request state.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass, field
from pathlib import Path
from typing import TYPE_CHECKING, Any

from migus.errors import HTTPError
from migus.flash import OLD_INPUT_KEY, Flash
from migus.http.forms import FormData, UploadFile
from migus.http.headers import Headers
from migus.http.request import Request
from migus.http.response import Redirect, Response, ResponseSink
from migus.middleware.chain import MiddlewareRegistry, build_chain
from migus.routing.binding import bind_arguments
from migus.routing.route import Route
from migus.routing.table import RouteTable
from migus.security.csrf import Csrf
from migus.sessions import Session, SessionStore

if TYPE_CHECKING:
    from migus.auth import Authenticator
    from migus.view import View

logger = logging.getLogger("migus.server")

NOT_FOUND_BODY = "404 Not Found"

_UNSAVED_INPUT = frozenset({"_token", "_method"})


@dataclass(slots=True)
class DispatchContext:
    """Everything one dispatch shares between middleware and the handler."""

    request: Request
    response: Response
    session: Session = field(default_factory=Session)
    route: Route | None = None
    captures: tuple[str, ...] = ()
    table: RouteTable | None = None
    auth: Authenticator | None = None
    state: dict[str, Any] = field(default_factory=dict)

    @property
    def params(self) -> dict[str, str]:
        """Captures keyed by placeholder name."""
        if self.route is None:
            return {}
        return dict(zip(self.route.params, self.captures, strict=False))

    @property
    def flash(self) -> Flash:
        return Flash(self.session)

    @property
    def csrf(self) -> Csrf:
        return Csrf(self.session)

    @property
    def user(self) -> dict[str, Any] | None:
        """The authenticated user, or None."""
        if self.auth is None:
            return None
        return self.auth.user(self)

    def url_for(self, name: str, params: Mapping[str, Any] | None = None, /, **kwargs: Any) -> str:
        if self.table is None:
            msg = "No route table attached to this dispatch."
            raise RuntimeError(msg)
        return self.table.url_for(name, params, **kwargs)

    def old(self, key: str, default: str = "") -> str:
        """A field from the input saved by ``Redirect.with_input()``."""
        if "old_input" not in self.state:
            self.state["old_input"] = self.flash.pull(OLD_INPUT_KEY, {}) or {}
        return self.state["old_input"].get(key, default)


class Dispatcher:
    """Routes one request at a time through the route table.

    The table and registry are read-only here; many threads may call
    ``dispatch()`` at once.
    """

    __slots__ = ("_auth", "_not_found_template", "_registry", "_sessions", "_table", "_view")

    def __init__(
        self,
        table: RouteTable,
        registry: MiddlewareRegistry | None = None,
        *,
        sessions: SessionStore | None = None,
        authenticator: Authenticator | None = None,
        view: View | None = None,
        not_found_template: str | Path | None = None,
    ) -> None:
        self._table = table
        self._registry = registry if registry is not None else MiddlewareRegistry()
        self._sessions = sessions
        self._auth = authenticator
        self._view = view
        self._not_found_template = not_found_template

    @property
    def table(self) -> RouteTable:
        return self._table

    def dispatch(
        self,
        uri: str,
        method: str = "GET",
        *,
        form: FormData | Mapping[str, Any] | None = None,
        headers: Headers | Mapping[str, str] | None = None,
        cookies: Mapping[str, str] | None = None,
        files: Mapping[str, UploadFile] | None = None,
        client: tuple[str, int] | None = None,
        server: tuple[str, int] | None = None,
        scheme: str = "http",
        session: Session | None = None,
        sink: ResponseSink | None = None,
    ) -> Response:
        """Dispatch one request and return the (already flushed) response.

        Configuration errors and unexpected exceptions propagate;
        ``HTTPError`` raised inside the chain becomes an error response.
        """
        request = Request.build(
            uri,
            method,
            form=form,
            headers=headers,
            cookies=cookies,
            files=files,
            client=client,
            server=server,
            scheme=scheme,
        )
        response = Response(sink)

        if session is None:
            session = self._sessions.load_from(request.cookies) if self._sessions else Session()
        if self._sessions is not None:
            store = self._sessions
            response.before_send(lambda r: store.save(session, r))

        ctx = DispatchContext(request, response, session, table=self._table, auth=self._auth)

        match = self._table.match(request.method, request.path)
        if match is None:
            logger.debug("404 %s %s", request.method, request.path)
            self._not_found(response)
            response.send()
            return response

        ctx.route = match.route
        ctx.captures = match.captures
        handler = match.route.handler
        view = self._view

        try:
            args = bind_arguments(handler.binding, ctx, handler.describe())

            def terminal() -> None:
                apply_result(ctx, handler.target()(*args), view)

            build_chain(match.route.middleware, self._registry, terminal, ctx)()
        except HTTPError as exc:
            if response.is_sent:
                raise
            _apply_http_error(response, exc)

        response.send()
        logger.debug("%d %s %s", response.status, request.method, request.path)
        return response

    def _not_found(self, response: Response) -> None:
        response.set_status(404)
        if self._not_found_template is not None:
            page = Path(self._not_found_template)
            if page.is_file():
                response.set_content(page.read_text(encoding="utf-8"))
                return
        response.set_content(NOT_FOUND_BODY)


def apply_result(ctx: DispatchContext, result: Any, view: View | None = None) -> None:
    """Write a handler's return value onto ``ctx.response``.

    ``None`` leaves the response as the handler built it. Strings and
    bytes become the body, dicts and lists become JSON. A ``Redirect``
    or ``Template`` is carried out, and a ``(value, status)`` tuple
    applies the value, then the status.
    """
    from migus.view import Template

    response = ctx.response
    match result:
        case None:
            return
        case Response():
            if result is not response:
                msg = "Handlers must return the Response they were given, not a new one."
                raise TypeError(msg)
        case tuple() if len(result) == 2 and isinstance(result[1], int):
            apply_result(ctx, result[0], view)
            response.set_status(result[1])
        case Redirect():
            _apply_redirect(ctx, result)
        case Template():
            if view is None:
                msg = f"Cannot render {result.name!r}: no view configured on the dispatcher."
                raise TypeError(msg)
            view.render_to_response(
                result.name, result.context, response, result.status, ctx=ctx, layout=result.layout
            )
        case str():
            response.set_content(result)
        case bytes():
            response.header("Content-Type", "application/octet-stream")
            response.set_content(result)
        case dict() | list():
            response.json(result, status=response.status)
        case _:
            msg = f"Cannot convert {type(result).__name__} to a response."
            raise TypeError(msg)


def _apply_redirect(ctx: DispatchContext, redirect: Redirect) -> None:
    flash = ctx.flash
    for key, message, kind in redirect.flashes:
        flash.add(key, message, kind)
    if redirect.keep_input:
        flash.put(
            OLD_INPUT_KEY,
            {
                k: v
                for k, v in ctx.request.all().items()
                if k not in _UNSAVED_INPUT and "password" not in k
            },
        )
    ctx.response.redirect(redirect.url, redirect.status)


def _apply_http_error(response: Response, exc: HTTPError) -> None:
    response.set_status(exc.status)
    for name, value in exc.headers:
        response.header(name, value)
    response.set_content(exc.detail or str(exc.status))
