"""Incoming HTTP request.

Route hooks reach the request through ``ctx.raw.request``; the parsed
body they see as ``ctx.raw.body`` is filled in by the body-parsing
middleware before any route runs.
"""

from dataclasses import dataclass, field, replace
from typing import Any
from urllib.parse import parse_qsl

from trellis._internal.asgi import Receive, Scope
from trellis.http.headers import Headers


class _Body:
    """Body state shared by a request and its routed copies."""

    __slots__ = ("parsed", "raw")

    def __init__(self) -> None:
        self.raw: bytes | None = None
        self.parsed: Any = {}


@dataclass(frozen=True, slots=True)
class Request:
    """Request metadata, fixed at creation, with the body read on demand."""

    method: str
    path: str
    headers: Headers
    query_string: bytes
    path_params: dict[str, str]
    client: tuple[str, int] | None
    _receive: Receive = field(repr=False, compare=False)
    _body: _Body = field(default_factory=_Body, repr=False, compare=False)

    @classmethod
    def from_asgi(cls, scope: Scope, receive: Receive) -> "Request":
        client = scope.get("client")
        return cls(
            method=scope["method"],
            path=scope["path"],
            headers=Headers(scope.get("headers", ())),
            query_string=scope.get("query_string", b""),
            path_params={},
            client=tuple(client) if client else None,
            _receive=receive,
        )

    @property
    def content_type(self) -> str | None:
        return self.headers.get("content-type")

    @property
    def query(self) -> dict[str, str]:
        """Query parameters; the last value wins for a repeated name."""
        return dict(parse_qsl(self.query_string.decode("latin-1")))

    @property
    def parsed_body(self) -> Any:
        """The deserialized body, or an empty mapping if nothing parsed it."""
        return self._body.parsed

    def set_parsed_body(self, value: Any) -> None:
        self._body.parsed = value

    def with_path_params(self, path_params: dict[str, str]) -> "Request":
        """A copy carrying the matched path parameters and the same body."""
        return replace(self, path_params=path_params)

    async def body(self) -> bytes:
        """Read the whole body. Later calls return the same bytes."""
        if self._body.raw is None:
            chunks: list[bytes] = []
            while True:
                message = await self._receive()
                chunks.append(message.get("body", b""))
                if not message.get("more_body", False):
                    break
            self._body.raw = b"".join(chunks)
        return self._body.raw
