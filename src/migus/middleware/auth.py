"""Access-control middleware: ``auth``, ``guest``, and ``admin``.

Each factory closes over the app's ``Authenticator`` and returns a
middleware that either calls ``next()`` or answers the request itself.
"""

from migus.auth import Authenticator
from migus.dispatch import DispatchContext
from migus.middleware.chain import Middleware, Next
from migus.security.audit import emit_security_event

ADMIN_ROLE = "admin"
ADMIN_DENIED = "Acceso denegado: se requieren permisos de administrador."


def auth_required(authenticator: Authenticator) -> Middleware:
    """Only logged-in users pass; others go to the login page."""

    def auth(ctx: DispatchContext, next: Next) -> None:  # noqa: A002
        if authenticator.user(ctx) is None:
            ctx.response.redirect(authenticator.config.login_url)
            return
        next()

    return auth


def guest_only(authenticator: Authenticator) -> Middleware:
    """Only anonymous visitors pass; logged-in users go home."""

    def guest(ctx: DispatchContext, next: Next) -> None:  # noqa: A002
        if authenticator.user(ctx) is not None:
            ctx.response.redirect(authenticator.config.home_url)
            return
        next()

    return guest


def admin_required(authenticator: Authenticator) -> Middleware:
    """Only users with the admin role pass; other users get a 403."""

    def admin(ctx: DispatchContext, next: Next) -> None:  # noqa: A002
        user = authenticator.user(ctx)
        if user is None:
            ctx.response.redirect(authenticator.config.login_url)
            return
        if user.get("role") != ADMIN_ROLE:
            emit_security_event("authz.admin.denied", request=ctx.request, user_id=user.get("id"))
            ctx.response.set_status(403).set_content(ADMIN_DENIED)
            return
        next()

    return admin
