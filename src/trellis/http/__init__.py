"""HTTP primitives used by the dispatcher: Headers, Request, Response."""

from trellis.http.headers import Headers
from trellis.http.request import Request
from trellis.http.response import Reply, Response

__all__ = ["Headers", "Reply", "Request", "Response"]
