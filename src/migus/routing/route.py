"""Route and RouteMatch frozen dataclasses."""

import re
from dataclasses import dataclass
from urllib.parse import unquote

from migus.routing.handlers import Handler


@dataclass(frozen=True, slots=True)
class Route:
    """A registered route.

    Routes are immutable; a ``RouteHandle`` edit stores a replacement
    under the same method and path.
    """

    method: str
    path: str
    handler: Handler
    middleware: tuple[str, ...] = ()
    name: str | None = None
    pattern: re.Pattern[str] | None = None
    params: tuple[str, ...] = ()

    def match(self, path: str) -> tuple[str, ...] | None:
        """Positional captures when *path* matches, else None.

        *path* is the raw request path; captures come back percent-decoded.
        """
        if self.pattern is None:
            return () if path == self.path else None
        m = self.pattern.fullmatch(path)
        if m is None:
            return None
        return tuple(unquote(group) for group in m.groups())


@dataclass(frozen=True, slots=True)
class RouteMatch:
    """Result of a successful lookup."""

    route: Route
    captures: tuple[str, ...] = ()

    @property
    def path_params(self) -> dict[str, str]:
        return dict(zip(self.route.params, self.captures, strict=False))
