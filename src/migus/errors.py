"""Migus exception hierarchy.

Shared by the route builder, dispatcher, middleware, and App so every
layer raises and catches the same types.
"""

from dataclasses import dataclass


class MigusError(Exception):
    """Base for all migus-specific errors."""


class ConfigurationError(MigusError):
    """Raised when routes, handlers, or middleware are wired incorrectly.

    Most of these surface at registration time or when the App freezes.
    A few (binding, reverse lookup) can only be detected per request and
    are raised from ``dispatch()`` instead.
    """


class HandlerResolutionError(ConfigurationError):
    """A handler reference could not be resolved to a callable."""


class BindingError(ConfigurationError):
    """A handler argument slot has no capture and no default."""


class UnknownMiddlewareError(ConfigurationError):
    """A route names middleware that was never registered."""


class RouteNameError(ConfigurationError):
    """Reverse lookup of a route name that does not exist."""


class MissingRouteParameter(ConfigurationError):
    """Reverse lookup without a value for one of the route placeholders."""


@dataclass(frozen=True, slots=True)
class HTTPError(MigusError):
    """An error that maps directly to an HTTP status code.

    Raise it from a handler or middleware; the dispatcher turns it into
    a response with the same status, detail body, and extra headers.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404, raised by handlers for a missing resource."""

    def __init__(self, detail: str = "404 Not Found") -> None:
        super().__init__(status=404, detail=detail)


class Forbidden(HTTPError):  # noqa: N818
    """403, access denied to an authenticated user."""

    def __init__(self, detail: str = "Forbidden") -> None:
        super().__init__(status=403, detail=detail)
