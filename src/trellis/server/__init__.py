"""ASGI dispatcher: the HTTP primitive that compiled route pipelines plug into."""

from trellis.server.dispatcher import Dispatcher

__all__ = ["Dispatcher"]
