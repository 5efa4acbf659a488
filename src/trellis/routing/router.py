"""Ordered route table.

Routes are tried in the order they were added and the first one whose
method and path both match handles the request. A later registration of
the same ``(method, path)`` can therefore never be reached; it is kept
and a warning is logged.
"""

import logging

from trellis.errors import MethodNotAllowed, NotFound
from trellis.routing.route import Route, RouteMatch

logger = logging.getLogger("trellis.routing")


class Router:
    """Route table matched in registration order.

    Usage::

        router = Router()
        router.add(Route("GET", "/users/:id", show_user))
        router.compile()
        match = router.match("GET", "/users/42")
    """

    __slots__ = ("_compiled", "_keys", "_routes")

    def __init__(self) -> None:
        self._routes: list[Route] = []
        self._keys: dict[tuple[str, str], Route] = {}
        self._compiled = False

    def add(self, route: Route) -> None:
        """Append a route. Must be called before compile()."""
        if self._compiled:
            msg = "Cannot add routes after compilation."
            raise RuntimeError(msg)
        key = (route.method, route.pattern.regex.pattern)
        existing = self._keys.get(key)
        if existing is not None:
            logger.warning(
                "duplicate route %s %s: %s registered earlier takes precedence",
                route.method,
                route.path,
                existing.path,
            )
        else:
            self._keys[key] = route
        self._routes.append(route)

    def compile(self) -> None:
        """Freeze the table. No more routes can be added."""
        self._compiled = True

    @property
    def routes(self) -> tuple[Route, ...]:
        return tuple(self._routes)

    def match(self, method: str, path: str) -> RouteMatch:
        """Find the first route for *method* and *path*.

        Raises ``NotFound`` when no route matches the path, and
        ``MethodNotAllowed`` when some do but none for this method.
        """
        method = method.upper()
        allowed: set[str] = set()
        for route in self._routes:
            params = route.pattern.match(path)
            if params is None:
                continue
            if route.method == method:
                return RouteMatch(route=route, path_params=params)
            allowed.add(route.method)

        if allowed:
            raise MethodNotAllowed(frozenset(allowed))
        raise NotFound(f"No route matches {method} {path!r}")
