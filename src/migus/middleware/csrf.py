"""CSRF middleware.

Safe methods (GET, HEAD, OPTIONS) pass through. Any other request must
carry the session token, looked up in this order:

1. the ``_token`` form field
2. the ``X-CSRF-TOKEN`` header
3. the ``X-XSRF-TOKEN`` header, when an ``XSRF-TOKEN`` cookie was sent

A missing or wrong token answers 419 without calling ``next()``.
"""

from migus.dispatch import DispatchContext
from migus.http.request import Request
from migus.middleware.chain import Next
from migus.security.audit import emit_security_event
from migus.security.csrf import DEFAULT_CONFIG, CSRFConfig

SAFE_METHODS = frozenset({"GET", "HEAD", "OPTIONS"})
REJECTED_STATUS = 419
REJECTED_BODY = "CSRF token inválido o ausente."


def submitted_token(request: Request, config: CSRFConfig = DEFAULT_CONFIG) -> str | None:
    token = request.input(config.field_name)
    if token:
        return token
    token = request.header(config.header_name)
    if token:
        return token
    if request.cookie(config.xsrf_cookie) is not None:
        return request.header(config.xsrf_header)
    return None


def csrf(ctx: DispatchContext, next: Next) -> None:  # noqa: A002
    if ctx.request.method in SAFE_METHODS:
        next()
        return
    csrf_ = ctx.csrf
    if not csrf_.validate(submitted_token(ctx.request, csrf_.config)):
        emit_security_event("csrf.rejected", request=ctx.request)
        ctx.response.set_status(REJECTED_STATUS).set_content(REJECTED_BODY)
        return
    next()
