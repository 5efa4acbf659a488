"""Shared type aliases used across trellis modules."""

from collections.abc import Callable
from typing import Any, TypeAlias

# Dispatcher-level handler: receives a Request, returns a Response
Handler: TypeAlias = Callable[..., Any]
