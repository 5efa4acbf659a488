"""Writes a ``Response`` to ASGI ``send``."""

from trellis._internal.asgi import Send
from trellis.http.response import Response

# Statuses that never carry a message body
_EMPTY_STATUSES = frozenset({204, 205, 304})


def _encode(name: str, value: str) -> tuple[bytes, bytes]:
    return name.lower().encode("latin-1"), value.encode("latin-1")


async def send_response(response: Response, send: Send) -> None:
    status = response.status
    body = b"" if status < 200 or status in _EMPTY_STATUSES else response.body_bytes
    headers = [
        _encode("content-type", response.content_type),
        *(_encode(name, value) for name, value in response.headers),
        _encode("content-length", str(len(body))),
    ]
    await send({"type": "http.response.start", "status": status, "headers": headers})
    await send({"type": "http.response.body", "body": body})
