"""Dispatcher registrations and match results."""

from collections.abc import Callable
from dataclasses import dataclass, field
from typing import Any

from trellis.routing.params import PathPattern, compile_path


@dataclass(frozen=True, slots=True)
class Route:
    """One ``(method, path)`` registration bound to a handler."""

    method: str
    path: str
    handler: Callable[..., Any]
    pattern: PathPattern = field(init=False, repr=False, compare=False)

    def __post_init__(self) -> None:
        object.__setattr__(self, "method", self.method.upper())
        object.__setattr__(self, "pattern", compile_path(self.path))


@dataclass(frozen=True, slots=True)
class RouteMatch:
    route: Route
    path_params: dict[str, str]
