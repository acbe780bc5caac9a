"""Signed-cookie sessions.

Session data is serialized as JSON and signed with ``itsdangerous``; it
is readable by the client but cannot be forged. The dispatcher loads the
session from the request cookie, threads it through the
``DispatchContext``, and writes it back as a ``Set-Cookie`` just before
the response is flushed.
"""

import logging
from collections.abc import Iterator, Mapping, MutableMapping
from dataclasses import dataclass
from typing import Any

from itsdangerous import BadData, URLSafeTimedSerializer

from migus.errors import ConfigurationError
from migus.http.response import Response

logger = logging.getLogger("migus.security")


class Session(MutableMapping[str, Any]):
    """Per-request session data.

    Values must be JSON-serializable. ``regenerate()`` discards every
    key, which is what login and logout do to prevent fixation.
    """

    __slots__ = ("_data", "regenerated")

    def __init__(self, data: Mapping[str, Any] | None = None) -> None:
        self._data: dict[str, Any] = dict(data or {})
        self.regenerated = False

    def __getitem__(self, key: str) -> Any:
        return self._data[key]

    def __setitem__(self, key: str, value: Any) -> None:
        self._data[key] = value

    def __delitem__(self, key: str) -> None:
        del self._data[key]

    def __iter__(self) -> Iterator[str]:
        return iter(self._data)

    def __len__(self) -> int:
        return len(self._data)

    def __repr__(self) -> str:
        return f"Session({self._data!r})"

    def regenerate(self) -> None:
        self._data.clear()
        self.regenerated = True

    def to_dict(self) -> dict[str, Any]:
        return dict(self._data)


@dataclass(frozen=True, slots=True)
class SessionConfig:
    """Session cookie settings. ``secret_key`` is required."""

    secret_key: str
    cookie_name: str = "migus_session"
    max_age: int = 86400
    path: str = "/"
    domain: str | None = None
    secure: bool = False
    httponly: bool = True
    samesite: str = "Lax"


class SessionStore:
    """Loads sessions from and saves them to a signed cookie."""

    __slots__ = ("_config", "_serializer")

    def __init__(self, config: SessionConfig) -> None:
        if not config.secret_key:
            msg = "SessionConfig.secret_key must not be empty."
            raise ConfigurationError(msg)
        self._config = config
        self._serializer = URLSafeTimedSerializer(config.secret_key, salt="migus.session")

    @property
    def config(self) -> SessionConfig:
        return self._config

    def load(self, cookie_value: str | None) -> Session:
        """Verify and decode *cookie_value*; tampered or expired cookies yield an empty session."""
        if not cookie_value:
            return Session()
        try:
            data = self._serializer.loads(cookie_value, max_age=self._config.max_age)
        except BadData:
            logger.debug("Discarding session cookie with a bad or expired signature")
            return Session()
        if not isinstance(data, dict):
            return Session()
        return Session(data)

    def load_from(self, cookies: Mapping[str, str]) -> Session:
        return self.load(cookies.get(self._config.cookie_name))

    def dumps(self, session: Session) -> str:
        return self._serializer.dumps(session.to_dict())

    def save(self, session: Session, response: Response) -> None:
        """Queue the signed session cookie on *response*."""
        cfg = self._config
        response.set_cookie(
            cfg.cookie_name,
            self.dumps(session),
            max_age=cfg.max_age,
            path=cfg.path,
            domain=cfg.domain,
            secure=cfg.secure,
            httponly=cfg.httponly,
            samesite=cfg.samesite,
        )
