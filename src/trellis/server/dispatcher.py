"""Request dispatcher: method+path registration and middleware.

The route-tree layer talks to the dispatcher through two calls only:
``register(method, path, handler)`` and ``use(middleware)``. Everything
else (path matching, ASGI translation, 404/405) lives behind them.

Mutable during setup. Frozen by ``compile()``, which the app calls once
when it finalizes its route table.
"""

from collections.abc import Callable
from typing import Any

from trellis._internal.asgi import Receive, Scope, Send
from trellis._internal.types import Handler
from trellis.routing.route import Route
from trellis.routing.router import Router
from trellis.server.handler import handle_request


class Dispatcher:
    """Registers handlers against ``(method, path)`` and serves them over ASGI.

    Usage::

        dispatcher = Dispatcher()
        dispatcher.use(JSONBody())
        dispatcher.register("GET", "/users/:id", show_user)
        dispatcher.compile()
    """

    __slots__ = ("_middleware", "_pending", "_router")

    def __init__(self) -> None:
        self._pending: list[Route] = []
        self._middleware: list[Callable[..., Any]] = []
        self._router: Router | None = None

    # -- Setup --

    def register(self, method: str, path: str, handler: Handler) -> None:
        """Bind *handler* to ``method path``.

        Duplicate registrations are accepted; the first one is matched.
        """
        self._check_not_frozen()
        self._pending.append(Route(method, path, handler))

    def use(self, middleware: Callable[..., Any]) -> None:
        """Append a middleware to the chain. First added runs outermost."""
        self._check_not_frozen()
        self._middleware.append(middleware)

    def compile(self) -> None:
        """Build the route table. No more registrations afterwards."""
        self._check_not_frozen()
        router = Router()
        for route in self._pending:
            router.add(route)
        router.compile()
        self._router = router

    # -- Introspection --

    @property
    def frozen(self) -> bool:
        return self._router is not None

    @property
    def routes(self) -> list[Route]:
        """Registrations in the order they were made."""
        return list(self._pending)

    @property
    def middleware(self) -> tuple[Callable[..., Any], ...]:
        return tuple(self._middleware)

    # -- ASGI --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if self._router is None:
            self.compile()
        assert self._router is not None
        await handle_request(
            scope,
            receive,
            send,
            router=self._router,
            middleware=tuple(self._middleware),
        )

    def _check_not_frozen(self) -> None:
        if self._router is not None:
            msg = (
                "Cannot modify the dispatcher after it has started serving requests. "
                "Register routes and middleware before the first request."
            )
            raise RuntimeError(msg)
