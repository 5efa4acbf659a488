"""Dispatcher middleware.

Plugins contribute middleware as zero-argument factories; the app calls
each factory once and hands the result to ``Dispatcher.use``. What comes
back is any callable of this shape::

    async def stamp(request: Request, next: Next) -> Response:
        response = await next(request)
        return response.with_header("X-Served-By", "trellis")

Middleware wraps every request the dispatcher sees, matched or not, and
runs before the body is handed to a route pipeline.
"""

from collections.abc import Awaitable, Callable
from typing import Protocol, TypeAlias

from trellis.http.request import Request
from trellis.http.response import Response

Next: TypeAlias = Callable[[Request], Awaitable[Response]]


class Middleware(Protocol):
    async def __call__(self, request: Request, next: Next) -> Response: ...
