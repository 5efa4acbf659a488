"""Middleware: Protocol-based, no inheritance required.

A middleware is any callable matching:
    async def mw(request: Request, next: Next) -> Response

Plugins contribute middleware as zero-argument factories; the app calls
each factory once and hands the result to the dispatcher.

Built-in middleware:
    JSONBody -- Parses JSON request bodies before any route runs
"""

from trellis.middleware.body import JSONBody
from trellis.middleware.protocol import Middleware, Next

__all__ = ["JSONBody", "Middleware", "Next"]
