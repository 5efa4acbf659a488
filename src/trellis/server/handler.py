"""Per-request ASGI handling for the dispatcher.

Builds a ``Request`` from the scope, passes it through the middleware
chain into route matching, and writes whatever ``Response`` comes back.
Failures outside a route pipeline are turned into responses here.
"""

from collections.abc import Callable, Sequence
from functools import partial
from typing import Any

from trellis._internal.asgi import Receive, Scope, Send
from trellis.errors import HTTPError
from trellis.http.request import Request
from trellis.http.response import Response
from trellis.middleware.protocol import Next
from trellis.routing.router import Router
from trellis.server.errors import handle_http_error, handle_internal_error
from trellis.server.sender import send_response


def _link(mw: Callable[..., Any], inner: Next, request: Request) -> Any:
    return mw(request, inner)


def build_chain(endpoint: Next, middleware: Sequence[Callable[..., Any]]) -> Next:
    """Wrap *endpoint* so the first middleware in the list runs outermost."""
    chain = endpoint
    for mw in reversed(middleware):
        chain = partial(_link, mw, chain)
    return chain


async def handle_request(
    scope: Scope,
    receive: Receive,
    send: Send,
    *,
    router: Router,
    middleware: Sequence[Callable[..., Any]],
) -> None:
    if scope["type"] != "http":
        return

    async def route(request: Request) -> Response:
        match = router.match(request.method, request.path)
        return await match.route.handler(request.with_path_params(match.path_params))

    request = Request.from_asgi(scope, receive)
    try:
        response = await build_chain(route, middleware)(request)
    except HTTPError as exc:
        response = handle_http_error(exc, request)
    except Exception as exc:
        response = handle_internal_error(exc, request)
    await send_response(response, send)
