"""Structured validation failures.

Hooks and handlers report client-facing problems by raising a
``ValidationFailure`` made of ``ErrorEntry`` values. Each entry carries a
message from the app's error taxonomy and a mapping of detail data::

    from trellis import affirm

    def ensure_name(ctx):
        affirm("name" in ctx.data, "field missing", {"field": "name"})
        affirm(len(ctx.data["name"]) < 40, "name too long")
"""

from collections.abc import Iterable, Mapping
from dataclasses import dataclass, field
from typing import Any

from trellis.errors import ValidationFailure


@dataclass(frozen=True, slots=True)
class ErrorEntry:
    """A single validation failure: taxonomy message plus detail data."""

    msg: str
    data: Mapping[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        """Wire shape used in 400 response bodies."""
        return {"msg": self.msg, "data": dict(self.data)}


def make_error(error: ErrorEntry | Mapping[str, Any]) -> ErrorEntry:
    """Normalize a mapping with ``msg``/``data`` keys into an ``ErrorEntry``."""
    if isinstance(error, ErrorEntry):
        return error
    return ErrorEntry(msg=error["msg"], data=error.get("data") or {})


def affirm(condition: Any, msg: str, data: Mapping[str, Any] | None = None) -> None:
    """Raise a single-entry ``ValidationFailure`` unless *condition* is truthy."""
    if not condition:
        affirm_error({"msg": msg, "data": data or {}})


def affirm_error(
    errors: ErrorEntry | Mapping[str, Any] | Iterable[ErrorEntry | Mapping[str, Any]] | None,
) -> None:
    """Raise a ``ValidationFailure`` built from one entry or a list of entries.

    ``None`` and an empty list are no-ops, so callers can collect errors
    and hand the (possibly empty) list over unconditionally.
    """
    if errors is None:
        return
    if isinstance(errors, (ErrorEntry, Mapping)):
        entries = [errors]
    else:
        entries = list(errors)
    if not entries:
        return
    raise ValidationFailure(make_error(entry) for entry in entries)
