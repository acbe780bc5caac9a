"""Session-backed flash messages.

A flash message is stored under a name and read (consumed) once,
usually on the request after a redirect::

    ctx.flash.add("login_error", "Credenciales incorrectas.", "error")
    ...
    ctx.flash.render("login_error")  # '<div class="flash flash-error">...</div>'

One message is kept per name; adding under an existing name replaces
it. ``put`` and ``pull`` carry arbitrary JSON values (old form input)
in session slots of their own.
"""

import html
from collections.abc import MutableMapping
from typing import Any, TypedDict

FLASH_KEY = "FLASH_MESSAGES"
OLD_INPUT_KEY = "_old_input"

ERROR = "error"
WARNING = "warning"
INFO = "info"
SUCCESS = "success"

TYPES = frozenset({ERROR, WARNING, INFO, SUCCESS})


class FlashMessage(TypedDict):
    message: str
    type: str


class Flash:
    """Flash messages stored in one session."""

    __slots__ = ("_session",)

    def __init__(self, session: MutableMapping[str, Any]) -> None:
        self._session = session

    def _store(self, create: bool = False) -> dict[str, Any] | None:
        store = self._session.get(FLASH_KEY)
        if store is None and create:
            store = {}
            self._session[FLASH_KEY] = store
        return store

    def _drop(self, name: str) -> Any:
        store = self._store()
        if store is None or name not in store:
            return None
        value = store.pop(name)
        if not store:
            del self._session[FLASH_KEY]
        return value

    def add(self, name: str, message: str, type: str = INFO) -> None:  # noqa: A002
        store = self._store(create=True)
        assert store is not None
        store[name] = {"message": message, "type": type}

    def consume(self, name: str) -> FlashMessage | None:
        """Return and remove the message stored under *name*."""
        return self._drop(name)

    def has(self, name: str) -> bool:
        store = self._store()
        return store is not None and name in store

    def consume_all(self) -> dict[str, FlashMessage]:
        return self._session.pop(FLASH_KEY, None) or {}

    def set(self, key: str, message: str) -> None:
        self.add(key, message, INFO)

    def get(self, key: str) -> str | None:
        """Consume *key* and return only its text."""
        flash = self.consume(key)
        return flash["message"] if flash else None

    def put(self, key: str, value: Any) -> None:
        """Store a raw JSON value in its own session slot for the next request."""
        self._session[key] = value

    def pull(self, key: str, default: Any = None) -> Any:
        return self._session.pop(key, default)

    def render(self, name: str) -> str:
        flash = self.consume(name)
        if flash is None:
            return ""
        return format_flash(flash)

    def render_all(self) -> str:
        return "".join(
            format_flash(flash) + "\n"
            for flash in self.consume_all().values()
            if isinstance(flash, dict) and "message" in flash
        )


def format_flash(flash: FlashMessage) -> str:
    kind = flash.get("type", INFO)
    if kind not in TYPES:
        kind = INFO
    message = html.escape(str(flash["message"]), quote=True)
    return f'<div class="flash flash-{kind}">{message}</div>'
