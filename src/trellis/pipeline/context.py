"""Per-request context handed to every route hook and handler."""

from collections.abc import Mapping
from dataclasses import dataclass
from typing import Any

from trellis.http.request import Request
from trellis.http.response import Reply


@dataclass(frozen=True, slots=True)
class RawExchange:
    """Transport-level handles for the current request."""

    request: Request
    reply: Reply
    params: Mapping[str, str]
    body: Any


@dataclass(frozen=True, slots=True)
class RouteMeta:
    """The compiled route that matched: its method and path pattern."""

    method: str
    path: str


class RequestContext:
    """One per request, shared by every step of its pipeline.

    ``data`` is the path parameters overlaid with the parsed body, so a
    key present in both takes the body's value. Hooks may attach their
    own attributes; later steps see them::

        async def load_user(ctx):
            ctx.user = await users.get(ctx.data["name"])

        def show_user(ctx):
            return ctx.user
    """

    def __init__(self, raw: RawExchange, meta: RouteMeta, data: dict[str, Any]) -> None:
        self.raw = raw
        self.meta = meta
        self.data = data

    @classmethod
    def from_request(cls, request: Request, reply: Reply, *, method: str, path: str) -> "RequestContext":
        params = dict(request.path_params)
        body = request.parsed_body
        data: dict[str, Any] = dict(params)
        if isinstance(body, Mapping):
            data.update(body)
        return cls(
            raw=RawExchange(request=request, reply=reply, params=params, body=body),
            meta=RouteMeta(method=method, path=path),
            data=data,
        )

    @property
    def self(self) -> "RequestContext":
        """The context itself, for hooks written against ``ctx.self``."""
        return self

    def get(self, name: str, default: Any = None) -> Any:
        """Read an attribute a previous hook may or may not have set."""
        return getattr(self, name, default)

    def __repr__(self) -> str:
        return f"<RequestContext {self.meta.method} {self.meta.path}>"
