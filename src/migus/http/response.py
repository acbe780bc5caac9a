"""HTTP response buffer with a one-shot flush.

Handlers and middleware share a single mutable ``Response`` per dispatch.
They set status, headers, cookies, and body on it; ``send()`` hands the
finished response to a sink exactly once. Later calls are no-ops, so a
middleware that already answered (a redirect, a 419) cannot be flushed a
second time by the dispatcher.

``Redirect`` is the value a handler returns to ask for a redirect, with
optional flash messages and old input attached.
"""

import html
import json as json_module
import string
from collections.abc import Callable
from dataclasses import dataclass, replace
from typing import Any
from urllib.parse import quote

from migus.http.cookies import SetCookie

type ResponseSink = Callable[[Response], None]
type SendHook = Callable[[Response], None]

DEFAULT_CONTENT_TYPE = "text/html; charset=utf-8"
LOCATION_SAFE = string.punctuation
JSON_CONTENT_TYPE = "application/json; charset=utf-8"


def _body_allowed(status: int) -> bool:
    """Whether an HTTP status code permits a response body."""
    return not (100 <= status < 200 or status in {204, 304})


class Response:
    """A mutable HTTP response bound to an optional sink.

    Usage::

        response.set_status(201).header("X-Id", "7")
        response.set_content("<p>created</p>")
        response.send()
    """

    __slots__ = ("_before_send", "_body", "_cookies", "_headers", "_sent", "_sink", "status")

    def __init__(self, sink: ResponseSink | None = None, *, status: int = 200) -> None:
        self.status = status
        self._headers: list[tuple[str, str]] = [("Content-Type", DEFAULT_CONTENT_TYPE)]
        self._body = bytearray()
        self._cookies: list[SetCookie] = []
        self._sent = False
        self._sink = sink
        self._before_send: list[SendHook] = []

    def __repr__(self) -> str:
        return f"<Response {self.status} sent={self._sent} {len(self._body)} bytes>"

    # -- Status and headers --

    def set_status(self, status: int) -> Response:
        self.status = status
        return self

    def header(self, name: str, value: str, replace: bool = True) -> Response:
        """Set header *name*.

        With ``replace=True`` (the default) any earlier value under the
        same name is dropped; ``replace=False`` adds another value.
        """
        if replace:
            wanted = name.lower()
            self._headers = [(n, v) for n, v in self._headers if n.lower() != wanted]
        self._headers.append((name, value))
        return self

    def get_header(self, name: str, default: str | None = None) -> str | None:
        wanted = name.lower()
        for n, v in self._headers:
            if n.lower() == wanted:
                return v
        return default

    @property
    def headers(self) -> tuple[tuple[str, str], ...]:
        return tuple(self._headers)

    @property
    def content_type(self) -> str:
        return self.get_header("Content-Type") or DEFAULT_CONTENT_TYPE

    # -- Body --

    def set_content(self, content: str | bytes) -> Response:
        """Replace the body."""
        self._body = bytearray(content.encode("utf-8") if isinstance(content, str) else content)
        return self

    def write(self, chunk: str | bytes) -> Response:
        """Append to the body."""
        self._body.extend(chunk.encode("utf-8") if isinstance(chunk, str) else chunk)
        return self

    @property
    def body(self) -> bytes:
        return bytes(self._body)

    @property
    def text(self) -> str:
        return self._body.decode("utf-8")

    def json(self, data: Any, status: int = 200) -> Response:
        """Serialize *data* as the JSON body. Non-ASCII text is kept as-is."""
        self.status = status
        self.header("Content-Type", JSON_CONTENT_TYPE)
        return self.set_content(json_module.dumps(data, ensure_ascii=False))

    def redirect(self, url: str, status: int = 302) -> Response:
        """Point the client at *url* with a small HTML fallback body.

        Spaces and non-ASCII characters in *url* are percent-encoded; ASCII
        punctuation, existing escapes included, is kept.
        """
        url = quote(url, safe=LOCATION_SAFE)
        self.status = status
        self.header("Location", url)
        self.header("Content-Type", DEFAULT_CONTENT_TYPE)
        safe = html.escape(url, quote=True)
        return self.set_content(
            f'<html><body>Redirecting to <a href="{safe}">{safe}</a></body></html>'
        )

    # -- Cookies --

    def set_cookie(
        self,
        name: str,
        value: str,
        *,
        max_age: int | None = None,
        path: str = "/",
        domain: str | None = None,
        secure: bool = False,
        httponly: bool = True,
        samesite: str | None = "Lax",
    ) -> Response:
        self._cookies = [c for c in self._cookies if c.name != name or c.path != path]
        self._cookies.append(
            SetCookie(
                name=name,
                value=value,
                max_age=max_age,
                path=path,
                domain=domain,
                secure=secure,
                httponly=httponly,
                samesite=samesite,
            )
        )
        return self

    def delete_cookie(self, name: str, path: str = "/", domain: str | None = None) -> Response:
        self._cookies = [c for c in self._cookies if c.name != name or c.path != path]
        self._cookies.append(SetCookie.expired(name, path=path, domain=domain))
        return self

    @property
    def cookies(self) -> tuple[SetCookie, ...]:
        return tuple(self._cookies)

    # -- Flushing --

    def before_send(self, hook: SendHook) -> None:
        """Run *hook* with this response right before it is flushed."""
        self._before_send.append(hook)

    @property
    def is_sent(self) -> bool:
        return self._sent

    def send(self) -> bool:
        """Flush to the sink. Returns False when the response was already sent."""
        if self._sent:
            return False
        self._sent = True
        for hook in self._before_send:
            hook(self)
        if self._sink is not None:
            self._sink(self)
        return True

    def raw_headers(self) -> list[tuple[bytes, bytes]]:
        """ASGI header pairs, including Set-Cookie and Content-Length."""
        raw = [(n.lower().encode("latin-1"), v.encode("latin-1")) for n, v in self._headers]
        raw.extend((b"set-cookie", c.to_header_value().encode("latin-1")) for c in self._cookies)
        raw.append((b"content-length", str(len(self.wire_body())).encode("latin-1")))
        return raw

    def wire_body(self) -> bytes:
        """The body as it goes on the wire (empty for bodiless statuses)."""
        return bytes(self._body) if _body_allowed(self.status) else b""


@dataclass(frozen=True, slots=True)
class Redirect:
    """A redirect returned from a handler.

    Each ``with_*`` call returns a new Redirect; flash messages and old
    input are written to the session when the dispatcher applies it::

        return Redirect("/login").with_("login_error", "Credenciales incorrectas.", "error").with_input()
    """

    url: str
    status: int = 302
    flashes: tuple[tuple[str, str, str], ...] = ()
    keep_input: bool = False

    def with_(self, key: str, message: str, type: str = "info") -> Redirect:  # noqa: A002
        return replace(self, flashes=(*self.flashes, (key, message, type)))

    def with_input(self) -> Redirect:
        return replace(self, keep_input=True)
