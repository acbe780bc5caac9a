"""Route table: per-method route storage, lookup, and reverse lookup.

Within one method a path holds at most one route. Registering the same
method and path again replaces the stored route in place, so it keeps
its position in the scan order.

Lookup tries an exact match on the static path first, then scans the
method's routes in registration order; the first pattern that matches
wins.
"""

import logging
import re
from collections.abc import Iterator, Mapping
from dataclasses import replace
from typing import Any
from urllib.parse import urlencode

from migus.errors import ConfigurationError, MissingRouteParameter, RouteNameError
from migus.routing.compiler import PLACEHOLDER
from migus.routing.route import Route, RouteMatch

logger = logging.getLogger("migus.routing")

METHODS = ("GET", "POST", "PUT", "PATCH", "DELETE")


class RouteTable:
    """Mutable during setup, read-only once frozen."""

    __slots__ = ("_frozen", "_names", "_routes")

    def __init__(self) -> None:
        self._routes: dict[str, dict[str, Route]] = {m: {} for m in METHODS}
        self._names: dict[str, tuple[str, str]] = {}
        self._frozen = False

    # -- Mutation --

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = "Cannot modify routes after the app has started serving requests."
            raise RuntimeError(msg)

    def add(self, route: Route) -> Route:
        """Store *route*, replacing any route with the same method and path."""
        self._check_not_frozen()
        bucket = self._routes.get(route.method)
        if bucket is None:
            msg = f"Unsupported HTTP method {route.method!r}; expected one of {', '.join(METHODS)}"
            raise ConfigurationError(msg)
        previous = bucket.get(route.path)
        if previous is not None:
            logger.debug("Replacing route %s %s", route.method, route.path)
            if route.name is None and previous.name is not None:
                route = replace(route, name=previous.name)
        bucket[route.path] = route
        if route.name is not None:
            self._names[route.name] = (route.method, route.path)
        return route

    def get(self, method: str, path: str) -> Route | None:
        return self._routes.get(method, {}).get(path)

    def update(self, method: str, path: str, **changes: Any) -> Route:
        """Replace the stored route with a copy carrying *changes*."""
        self._check_not_frozen()
        route = self._require(method, path)
        updated = replace(route, **changes)
        self._routes[method][path] = updated
        return updated

    def assign_name(self, method: str, path: str, name: str, *, explicit: bool = True) -> bool:
        """Give the route at (*method*, *path*) the name *name*.

        An explicit name always takes the slot, clearing it from any
        other route. A non-explicit (automatic) name is skipped when
        taken. Returns whether the name was assigned.
        """
        self._check_not_frozen()
        route = self._require(method, path)
        holder = self._names.get(name)
        if holder is not None and holder != (method, path):
            if not explicit:
                return False
            other = self.get(*holder)
            if other is not None and other.name == name:
                self._routes[holder[0]][holder[1]] = replace(other, name=None)
        if route.name is not None and route.name != name:
            self._names.pop(route.name, None)
        self._routes[method][path] = replace(route, name=name)
        self._names[name] = (method, path)
        return True

    def _require(self, method: str, path: str) -> Route:
        route = self.get(method, path)
        if route is None:
            msg = f"No route registered for {method} {path}"
            raise ConfigurationError(msg)
        return route

    # -- Lookup --

    def match(self, method: str, path: str) -> RouteMatch | None:
        bucket = self._routes.get(method)
        if not bucket:
            return None
        exact = bucket.get(path)
        if exact is not None and exact.pattern is None:
            return RouteMatch(exact)
        for route in bucket.values():
            captures = route.match(path)
            if captures is not None:
                return RouteMatch(route, captures)
        return None

    def url_for(self, name: str, params: Mapping[str, Any] | None = None, /, **kwargs: Any) -> str:
        """Build the URL for the route called *name*.

        Placeholders are filled from *params* and *kwargs*; values not
        used by a placeholder are appended as a query string::

            table.url_for("users.show", {"id": 7, "tab": "posts"})  # "/users/7?tab=posts"

        Raises:
            RouteNameError: No route has that name.
            MissingRouteParameter: A placeholder has no value.
        """
        try:
            method, path = self._names[name]
        except KeyError:
            msg = f"No route named {name!r}"
            raise RouteNameError(msg) from None

        values = {**(params or {}), **kwargs}
        used: set[str] = set()

        def fill(m: re.Match[str]) -> str:
            key = m.group(1)
            if key not in values:
                msg = f"Missing parameter {key!r} for route {name!r} ({method} {path})"
                raise MissingRouteParameter(msg)
            used.add(key)
            return str(values[key])

        url = PLACEHOLDER.sub(fill, path)
        extra = {k: v for k, v in values.items() if k not in used}
        if extra:
            url = f"{url}?{urlencode(extra, doseq=True)}"
        return url

    # -- Introspection --

    @property
    def names(self) -> Mapping[str, tuple[str, str]]:
        return dict(self._names)

    @property
    def routes(self) -> list[Route]:
        """All routes, grouped by method in ``METHODS`` order."""
        return [route for bucket in self._routes.values() for route in bucket.values()]

    def __iter__(self) -> Iterator[Route]:
        return iter(self.routes)

    def __len__(self) -> int:
        return sum(len(bucket) for bucket in self._routes.values())
