"""Middleware protocol, registry, and chain composition.

A middleware is any callable matching::

    def my_mw(ctx: DispatchContext, next: Next) -> None: ...

It works on ``ctx.response`` directly and calls ``next()`` to continue
inward. Not calling ``next()`` ends the chain there; the handler and
any inner middleware never run.

Routes refer to middleware by name. Names are resolved through a
``MiddlewareRegistry`` when the chain is built.
"""

import logging
from collections.abc import Callable, Iterable, Iterator
from typing import TYPE_CHECKING, Protocol

from migus.errors import ConfigurationError, UnknownMiddlewareError

if TYPE_CHECKING:
    from migus.dispatch import DispatchContext

logger = logging.getLogger("migus.routing")

type Next = Callable[[], None]


class Middleware(Protocol):
    """Protocol for migus middleware.

    Functions and callable objects both qualify::

        def timing(ctx, next):
            start = time.monotonic()
            next()
            ctx.response.header("X-Time", f"{time.monotonic() - start:.3f}")
    """

    def __call__(self, ctx: DispatchContext, next: Next) -> None: ...  # noqa: A002


class MiddlewareRegistry:
    """Name -> middleware lookup.

    With ``strict=True`` (the default) an unknown name is a
    configuration error. With ``strict=False`` the name is skipped and
    a debug line is logged.
    """

    __slots__ = ("_entries", "strict")

    def __init__(self, *, strict: bool = True) -> None:
        self._entries: dict[str, Middleware] = {}
        self.strict = strict

    def register(self, name: str, middleware: Middleware) -> None:
        if not name:
            msg = "Middleware name must not be empty."
            raise ConfigurationError(msg)
        if not callable(middleware):
            msg = f"Middleware {name!r} must be callable, got {type(middleware).__name__}"
            raise ConfigurationError(msg)
        self._entries[name] = middleware

    def get(self, name: str) -> Middleware | None:
        return self._entries.get(name)

    def __contains__(self, name: object) -> bool:
        return name in self._entries

    def __iter__(self) -> Iterator[str]:
        return iter(self._entries)

    def __len__(self) -> int:
        return len(self._entries)

    def unknown(self, names: Iterable[str]) -> list[str]:
        """Names from *names* that are not registered, in order."""
        return [n for n in dict.fromkeys(names) if n not in self._entries]

    def check(self, names: Iterable[str], where: str = "") -> None:
        """Raise ``UnknownMiddlewareError`` for unknown names when strict."""
        missing = self.unknown(names)
        if missing and self.strict:
            location = f" (used by {where})" if where else ""
            msg = f"Unknown middleware {', '.join(repr(n) for n in missing)}{location}"
            raise UnknownMiddlewareError(msg)


def build_chain(
    names: Iterable[str],
    registry: MiddlewareRegistry,
    terminal: Next,
    ctx: DispatchContext,
) -> Next:
    """Compose *names* around *terminal*; the first name runs outermost."""
    chain = terminal
    for name in reversed(tuple(names)):
        mw = registry.get(name)
        if mw is None:
            if registry.strict:
                msg = f"Unknown middleware {name!r}"
                raise UnknownMiddlewareError(msg)
            logger.debug("Skipping unknown middleware %r", name)
            continue

        def link(_mw: Middleware = mw, _next: Next = chain) -> None:
            _mw(ctx, _next)

        chain = link
    return chain
