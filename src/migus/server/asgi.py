"""ASGI edge: translates ASGI scope/messages to a dispatch call.

The only component that touches raw ASGI directly. It reads the whole
request body, parses form encodings, runs the synchronous dispatcher
in a worker thread, and writes the flushed response back through
``send()``.
"""

import logging
import traceback
from collections.abc import Awaitable, Callable, MutableMapping
from typing import Any
from urllib.parse import quote

import anyio

from migus.dispatch import Dispatcher
from migus.http.forms import FormData, is_form_content_type, parse_form
from migus.http.headers import Headers
from migus.http.response import Response

logger = logging.getLogger("migus.server")

type Scope = MutableMapping[str, Any]
type Receive = Callable[[], Awaitable[MutableMapping[str, Any]]]
type Send = Callable[[MutableMapping[str, Any]], Awaitable[None]]


async def read_body(receive: Receive) -> bytes:
    """Collect every ``http.request`` chunk into one body."""
    chunks: list[bytes] = []
    while True:
        message = await receive()
        if message["type"] == "http.disconnect":
            break
        chunks.append(message.get("body", b""))
        if not message.get("more_body", False):
            break
    return b"".join(chunks)


def request_uri(scope: Scope) -> str:
    """Raw path plus query string, as the dispatcher expects it.

    Prefers ``raw_path`` so encoded ``%3F`` and ``%2F`` stay inside their
    segment; without it the decoded ``path`` is quoted again.
    """
    raw_path = scope.get("raw_path")
    if raw_path:
        path = raw_path.decode("latin-1")
    else:
        path = quote(scope.get("path") or "/", safe="/:@!$&'()*+,;=~")
    query = scope.get("query_string", b"")
    if query:
        return f"{path}?{query.decode('latin-1')}"
    return path


async def handle_http(scope: Scope, receive: Receive, send: Send, *, dispatcher: Dispatcher, debug: bool) -> None:
    """Process a single HTTP request through the dispatcher."""
    if scope["type"] != "http":
        return

    method = scope.get("method", "GET")
    uri = request_uri(scope)
    headers = Headers(tuple(pair) for pair in scope.get("headers", ()))
    body = await read_body(receive)

    form: FormData | None = None
    content_type = headers.get("content-type")
    if body and is_form_content_type(content_type):
        try:
            form = parse_form(body, content_type or "")
        except ValueError as exc:
            logger.warning("400 %s %s: %s", method, uri, exc)
            await send_response(_plain(400, "Bad Request"), send)
            return

    flushed: list[Response] = []

    def run() -> Response:
        return dispatcher.dispatch(
            uri,
            method,
            form=form,
            headers=headers,
            client=_address(scope.get("client")),
            server=_address(scope.get("server")),
            scheme=scope.get("scheme", "http"),
            sink=flushed.append,
        )

    try:
        response = await anyio.to_thread.run_sync(run)
        if flushed:
            response = flushed[0]
        start = response_start(response)
    except Exception as exc:
        logger.exception("500 %s %s", method, uri)
        response = _server_error(exc, debug)
        start = response_start(response)

    await send(start)
    await send({"type": "http.response.body", "body": response.wire_body()})


def response_start(response: Response) -> dict[str, Any]:
    """The ``http.response.start`` message; header encoding errors raise here."""
    return {
        "type": "http.response.start",
        "status": response.status,
        "headers": response.raw_headers(),
    }


async def send_response(response: Response, send: Send) -> None:
    """Translate a flushed Response into ASGI send() calls."""
    await send(response_start(response))
    await send({"type": "http.response.body", "body": response.wire_body()})


def _server_error(exc: Exception, debug: bool) -> Response:
    if debug:
        detail = "".join(traceback.format_exception(exc))
        return _plain(500, f"Internal Server Error\n\n{detail}")
    return _plain(500, "Internal Server Error")


def _plain(status: int, text: str) -> Response:
    response = Response(status=status)
    response.header("Content-Type", "text/plain; charset=utf-8")
    response.set_content(text)
    return response


def _address(value: Any) -> tuple[str, int] | None:
    if not value:
        return None
    host, port = value[0], value[1]
    return (str(host), int(port or 0))
