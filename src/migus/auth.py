"""Session-backed authentication.

The logged-in user lives in two places:

- ``session["user"]``: a small dict (id, name, email, role, created_at)
  used on every request.
- An ``auth_token`` cookie pointing at a row in the ``sessions`` table,
  so a user stays logged in after the signed session cookie expires.

``Authenticator.user()`` reads the session first and falls back to the
cookie token, re-populating the session when the token is still valid.
"""

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from typing import TYPE_CHECKING, Any

from migus.security.audit import emit_security_event

if TYPE_CHECKING:
    from migus.data.services import SessionService
    from migus.dispatch import DispatchContext

logger = logging.getLogger("migus.security")

USER_KEY = "user"
_CACHE_KEY = "auth.user"


@dataclass(frozen=True, slots=True)
class AuthConfig:
    cookie_name: str = "auth_token"
    token_days: int = 7
    secure: bool = False
    login_url: str = "/login"
    home_url: str = "/"


def user_payload(user: Any) -> dict[str, Any]:
    """The session-safe subset of a user record (never the password)."""
    if isinstance(user, Mapping):
        get = user.get
    else:
        def get(key: str, default: Any = None) -> Any:
            return getattr(user, key, default)

    return {
        "id": get("id"),
        "name": get("name"),
        "email": get("email"),
        "role": get("role", "user") or "user",
        "created_at": get("created_at"),
    }


class Authenticator:
    """Login, logout, and current-user lookup for one app."""

    __slots__ = ("config", "sessions")

    def __init__(self, sessions: SessionService | None = None, config: AuthConfig | None = None) -> None:
        self.sessions = sessions
        self.config = config or AuthConfig()

    def user(self, ctx: DispatchContext) -> dict[str, Any] | None:
        """The current user for this dispatch, or None."""
        if _CACHE_KEY in ctx.state:
            return ctx.state[_CACHE_KEY]
        user = ctx.session.get(USER_KEY)
        if not user:
            user = self._user_from_token(ctx)
        ctx.state[_CACHE_KEY] = user or None
        return user or None

    def _user_from_token(self, ctx: DispatchContext) -> dict[str, Any] | None:
        token = ctx.request.cookie(self.config.cookie_name)
        if not token or self.sessions is None:
            return None
        record = self.sessions.find_user_by_token(token)
        if record is None:
            return None
        payload = user_payload(record)
        ctx.session[USER_KEY] = payload
        return payload

    def check(self, ctx: DispatchContext) -> bool:
        return self.user(ctx) is not None

    def login(self, ctx: DispatchContext, user: Any) -> dict[str, Any]:
        """Start an authenticated session for *user*.

        Rotates the session and the CSRF token, persists a login token
        when a ``SessionService`` is configured, and sets its cookie.
        """
        payload = user_payload(user)
        ctx.session.regenerate()
        if self.sessions is not None:
            expires = datetime.now(UTC) + timedelta(days=self.config.token_days)
            token = self.sessions.create_session(
                payload["id"], ctx.request.user_agent, ctx.request.ip, expires_at=expires
            )
            ctx.response.set_cookie(
                self.config.cookie_name,
                token,
                max_age=self.config.token_days * 86400,
                secure=self.config.secure,
                httponly=True,
                samesite="Lax",
            )
        ctx.session[USER_KEY] = payload
        ctx.csrf.regenerate()
        ctx.state[_CACHE_KEY] = payload
        emit_security_event("auth.login.success", request=ctx.request, user_id=payload["id"])
        return payload

    def logout(self, ctx: DispatchContext) -> None:
        current = self.user(ctx)
        token = ctx.request.cookie(self.config.cookie_name)
        if token and self.sessions is not None:
            self.sessions.delete_by_token(token)
        ctx.response.delete_cookie(self.config.cookie_name)
        ctx.session.regenerate()
        ctx.csrf.regenerate()
        ctx.state[_CACHE_KEY] = None
        emit_security_event(
            "auth.logout.success",
            request=ctx.request,
            user_id=current["id"] if current else None,
        )
