"""Session-backed CSRF tokens.

One token lives in the session under ``_token`` and is created on first
use. Forms embed it with ``csrf_field()``; the ``csrf`` middleware
compares the submitted value in constant time.
"""

import hmac
import html
import secrets
from collections.abc import MutableMapping
from dataclasses import dataclass
from typing import Any

from kida.utils.html import Markup

SESSION_KEY = "_token"
FORM_FIELD = "_token"


@dataclass(frozen=True, slots=True)
class CSRFConfig:
    """Where the CSRF token lives and where requests may submit it.

    Attributes:
        session_key: Session slot holding the token.
        field_name: Form field checked first.
        header_name: Header checked second.
        xsrf_cookie: Cookie that enables the ``xsrf_header`` fallback.
        xsrf_header: Header checked last, only when ``xsrf_cookie`` is present.
        token_length: Random bytes per token (hex-encoded).
    """

    session_key: str = SESSION_KEY
    field_name: str = FORM_FIELD
    header_name: str = "X-CSRF-TOKEN"
    xsrf_cookie: str = "XSRF-TOKEN"
    xsrf_header: str = "X-XSRF-TOKEN"
    token_length: int = 32


DEFAULT_CONFIG = CSRFConfig()


class Csrf:
    __slots__ = ("_config", "_session")

    def __init__(
        self, session: MutableMapping[str, Any], config: CSRFConfig = DEFAULT_CONFIG
    ) -> None:
        self._session = session
        self._config = config

    @property
    def config(self) -> CSRFConfig:
        return self._config

    def token(self) -> str:
        """The session token, created on first access."""
        token = self._session.get(self._config.session_key)
        if not token:
            token = self.regenerate()
        return token

    def regenerate(self) -> str:
        token = secrets.token_hex(self._config.token_length)
        self._session[self._config.session_key] = token
        return token

    def validate(self, token: str | None) -> bool:
        expected = self._session.get(self._config.session_key)
        if not expected or not token:
            return False
        return hmac.compare_digest(str(expected).encode("utf-8"), str(token).encode("utf-8"))

    def field(self) -> Markup:
        """Hidden ``<input>`` carrying the token, for use inside a form."""
        token = html.escape(self.token(), quote=True)
        return Markup(f'<input type="hidden" name="{self._config.field_name}" value="{token}">')
