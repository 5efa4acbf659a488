"""Dispatcher-level error responses.

Route pipelines translate their own failures; these cover what happens
outside them: unmatched paths, wrong methods, and faults in middleware.
"""

import logging

from trellis.errors import HTTPError
from trellis.http.request import Request
from trellis.http.response import Response

logger = logging.getLogger("trellis.server")


def handle_http_error(exc: HTTPError, request: Request) -> Response:
    """Map an HTTPError to a plain-text Response."""
    logger.debug("%d %s %s: %s", exc.status, request.method, request.path, exc.detail)
    resp = Response(body=exc.detail or f"Error {exc.status}", status=exc.status, content_type="text/plain")
    for name, value in exc.headers:
        resp = resp.with_header(name, value)
    return resp


def handle_internal_error(exc: Exception, request: Request) -> Response:
    """Handle unexpected exceptions as 500 errors."""
    logger.error("500 %s %s", request.method, request.path, exc_info=exc)
    return Response(body="Internal Server Error", status=500, content_type="text/plain")
