"""Trellis exception hierarchy.

Shared across the route-tree compiler, the plugin resolver, the pipeline
and the dispatcher so every module raises and catches the same types.

Authoring errors (``ConfigurationError`` and its subclasses) surface at
registration time and abort startup. ``ValidationFailure`` is the only
failure whose detail reaches clients. Everything else is reported as a
generic 500.
"""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from trellis.validation import ErrorEntry


class TrellisError(Exception):
    """Base for all trellis-specific errors."""


class ConfigurationError(TrellisError):
    """Raised when a route tree, plugin or app setting is malformed.

    Always raised while routes and plugins are being applied, never while
    a request is being served.
    """


class ClassificationError(ConfigurationError):
    """A route tree node is neither a handler, an extended handler nor a group."""


class RouteKeyError(ConfigurationError):
    """A route key is not of the form ``"[method] path"``."""


class PluginResolutionError(ConfigurationError):
    """A plugin reference could not be resolved to a descriptor."""


class NothingSentError(TrellisError):
    """A pipeline ran to completion without any step producing a result."""

    def __init__(self, method: str, path: str) -> None:
        self.method = method
        self.path = path
        super().__init__(f"nothing sent for {method} {path}")


class ValidationFailure(TrellisError):  # noqa: N818
    """One or more structured, client-facing validation errors.

    Raised by ``affirm`` / ``affirm_error`` from hooks and handlers. The
    error taxonomy decides whether the entries are shown to the client.
    """

    def __init__(self, errors: Iterable[ErrorEntry]) -> None:
        self.errors: tuple[ErrorEntry, ...] = tuple(errors)
        super().__init__(", ".join(error.msg for error in self.errors))


@dataclass(frozen=True, slots=True)
class HTTPError(TrellisError):
    """An error that maps directly to an HTTP status code.

    Raised by the dispatcher when no compiled route can take the request.
    """

    status: int
    detail: str = ""
    headers: tuple[tuple[str, str], ...] = ()

    def __str__(self) -> str:
        if self.detail:
            return f"{self.status}: {self.detail}"
        return str(self.status)


class NotFound(HTTPError):  # noqa: N818
    """404: no route matched the request path."""

    def __init__(self, detail: str = "Not Found") -> None:
        super().__init__(status=404, detail=detail)


class MethodNotAllowed(HTTPError):  # noqa: N818
    """405: route exists but not for this HTTP method."""

    def __init__(self, allowed: frozenset[str], detail: str = "") -> None:
        allow_value = ", ".join(sorted(allowed))
        default_detail = f"Method not allowed. Allowed methods: {allow_value}"
        super().__init__(
            status=405,
            detail=detail or default_detail,
            headers=(("Allow", allow_value),),
        )
