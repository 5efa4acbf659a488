"""JSON body parsing.

Route pipelines never read transport bytes. This middleware deserializes
``application/json`` bodies up front so ``request.parsed_body`` is a
ready mapping by the time the matched route runs.
"""

import json
import logging

from trellis.http.request import Request
from trellis.http.response import Response
from trellis.middleware.protocol import Next

logger = logging.getLogger("trellis.server")

_BODY_METHODS = frozenset({"POST", "PUT", "PATCH", "DELETE"})


class JSONBody:
    """Parse JSON request bodies into ``request.parsed_body``.

    Non-JSON or empty bodies leave ``parsed_body`` as an empty mapping.
    A malformed JSON body short-circuits with ``400``.
    """

    __slots__ = ("max_size",)

    def __init__(self, max_size: int = 1024 * 1024) -> None:
        self.max_size = max_size

    async def __call__(self, request: Request, next: Next) -> Response:
        if request.method in _BODY_METHODS and "json" in (request.content_type or ""):
            raw = await request.body()
            if len(raw) > self.max_size:
                return Response(body="Payload Too Large", status=413, content_type="text/plain")
            if raw.strip():
                try:
                    request.set_parsed_body(json.loads(raw))
                except ValueError:
                    logger.debug("malformed JSON body on %s %s", request.method, request.path)
                    return Response(body="Bad Request", status=400, content_type="text/plain")
        return await next(request)
