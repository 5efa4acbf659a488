"""Outgoing responses.

``Response`` is what the dispatcher sends. It is immutable: the
``with_*`` helpers return modified copies. ``Reply`` is the mutable side
handed to raw hooks, whose adjustments are folded into whichever
``Response`` the pipeline ends up sending.
"""

import json
from collections.abc import Mapping
from dataclasses import dataclass, field, replace
from typing import Any


@dataclass(frozen=True, slots=True)
class Response:
    body: str | bytes = ""
    status: int = 200
    content_type: str = "text/html; charset=utf-8"
    headers: tuple[tuple[str, str], ...] = ()

    @classmethod
    def from_json(cls, payload: Any, *, status: int = 200) -> "Response":
        return cls(json.dumps(payload), status=status, content_type="application/json")

    def with_status(self, status: int) -> "Response":
        return replace(self, status=status)

    def with_header(self, name: str, value: str) -> "Response":
        return self.with_headers({name: value})

    def with_headers(self, headers: Mapping[str, str]) -> "Response":
        return replace(self, headers=self.headers + tuple(headers.items()))

    @property
    def body_bytes(self) -> bytes:
        return self.body if isinstance(self.body, bytes) else self.body.encode("utf-8")

    @property
    def text(self) -> str:
        return self.body.decode("utf-8") if isinstance(self.body, bytes) else self.body

    def json(self) -> Any:
        return json.loads(self.body_bytes)


@dataclass(slots=True)
class Reply:
    """Status and headers set by raw hooks during one request.

    A status set here replaces the default ``200`` of a success response
    but leaves error statuses alone. Headers are added to whatever
    response is finally sent.
    """

    status: int | None = None
    headers: dict[str, str] = field(default_factory=dict)

    def set_header(self, name: str, value: str) -> None:
        self.headers[name] = value

    def apply(self, response: Response) -> Response:
        if self.headers:
            response = response.with_headers(self.headers)
        if self.status is not None and response.status == 200:
            response = response.with_status(self.status)
        return response
