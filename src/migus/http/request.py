"""Immutable HTTP request snapshot.

A Request is built once per dispatch, before any middleware runs, and
never changes afterwards. ``method`` is already the effective method
(after the ``_method`` form override), and ``path`` has its query string
and trailing slash removed.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from migus.http.cookies import parse_cookies
from migus.http.forms import FormData, UploadFile
from migus.http.headers import Headers
from migus.http.query import QueryParams

OVERRIDABLE_METHODS = frozenset({"PUT", "PATCH", "DELETE"})


def split_uri(uri: str) -> tuple[str, str]:
    """Split *uri* into ``(path, query_string)``; the path keeps no trailing slash."""
    path, _, query_string = uri.partition("?")
    path = path.rstrip("/") or "/"
    return path, query_string


def effective_method(method: str, form: Mapping[str, str]) -> str:
    """Upper-case *method*, honouring ``_method`` on POST for PUT/PATCH/DELETE."""
    method = method.upper()
    if method != "POST":
        return method
    override = (form.get("_method") or "").upper()
    if override in OVERRIDABLE_METHODS:
        return override
    return method


@dataclass(frozen=True, slots=True)
class Request:
    """An incoming HTTP request.

    Attributes:
        method: Effective HTTP method, upper-case.
        path: Normalized path without query string or trailing slash.
        uri: The URI as received, query string included.
        query: Parsed query string.
        form: Parsed form body (fields and uploaded files).
        headers: Case-insensitive request headers.
        cookies: Parsed ``Cookie`` header.
        client: ``(host, port)`` of the peer, when known.
        server: ``(host, port)`` the request arrived on, when known.
        scheme: ``"http"`` or ``"https"``.
    """

    method: str
    path: str
    uri: str = "/"
    query: QueryParams = field(default_factory=QueryParams)
    form: FormData = field(default_factory=FormData)
    headers: Headers = field(default_factory=Headers)
    cookies: Mapping[str, str] = field(default_factory=dict)
    client: tuple[str, int] | None = None
    server: tuple[str, int] | None = None
    scheme: str = "http"

    @classmethod
    def build(
        cls,
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
    ) -> Request:
        """Build a request from loose parts.

        Plain mappings are wrapped in the immutable ``FormData`` and
        ``Headers`` types. When *cookies* is omitted they are parsed
        from the ``Cookie`` header.
        """
        if not isinstance(form, FormData):
            form = FormData.of(form, files)
        elif files:
            form = FormData({k: form.get_list(k) for k in form}, {**form.files, **files})
        if not isinstance(headers, Headers):
            headers = Headers.of(headers)
        if cookies is None:
            cookies = parse_cookies(headers.get("cookie"))

        path, query_string = split_uri(uri)
        return cls(
            method=effective_method(method, form),
            path=path,
            uri=uri,
            query=QueryParams(query_string),
            form=form,
            headers=headers,
            cookies=dict(cookies),
            client=client,
            server=server,
            scheme=scheme,
        )

    # -- Input access --

    def input(self, key: str | None = None, default: Any = None) -> Any:
        """Form body value for *key*, or every form field when *key* is None."""
        if key is None:
            return dict(self.form)
        return self.form.get(key, default)

    def query_param(self, key: str | None = None, default: Any = None) -> Any:
        """Query string value for *key*, or every query field when *key* is None."""
        if key is None:
            return dict(self.query)
        return self.query.get(key, default)

    def value(self, key: str, default: Any = None) -> Any:
        """Look *key* up in the form body first, then in the query string."""
        if key in self.form:
            return self.form[key]
        return self.query.get(key, default)

    def all(self) -> dict[str, str]:
        """Query and form fields merged; form values win on conflict."""
        return {**self.query, **self.form}

    def only(self, *keys: str) -> dict[str, str]:
        """The subset of ``all()`` limited to *keys* that are present."""
        merged = self.all()
        return {k: merged[k] for k in keys if k in merged}

    @property
    def files(self) -> Mapping[str, UploadFile]:
        return self.form.files

    def cookie(self, key: str | None = None, default: Any = None) -> Any:
        if key is None:
            return dict(self.cookies)
        return self.cookies.get(key, default)

    def header(self, name: str, default: str | None = None) -> str | None:
        return self.headers.get(name, default)

    # -- Convenience --

    @property
    def ip(self) -> str:
        if self.client:
            return self.client[0]
        return "0.0.0.0"

    @property
    def user_agent(self) -> str:
        return self.headers.get("user-agent") or ""

    @property
    def is_ajax(self) -> bool:
        return self.headers.get("x-requested-with") == "XMLHttpRequest"

    def is_method(self, method: str) -> bool:
        return self.method == method.upper()

    @property
    def is_get(self) -> bool:
        return self.method == "GET"

    @property
    def is_post(self) -> bool:
        return self.method == "POST"
