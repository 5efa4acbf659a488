"""Error taxonomy: which failures clients get to see.

An app declares the validation messages it is willing to expose. A
``ValidationFailure`` whose entries all use declared messages becomes a
400 carrying the entries. Anything else, including a failure with a
single undeclared message among valid ones, becomes an opaque 500 and is
logged in full.
"""

import json
import logging
from collections.abc import Iterable
from dataclasses import dataclass

from trellis.errors import ValidationFailure
from trellis.http.response import Response

logger = logging.getLogger("trellis.pipeline")

INTERNAL_ERROR_MESSAGE = "internal server error"


@dataclass(frozen=True, slots=True)
class Translation:
    """Status and body for a failed request."""

    status: int
    body: str
    content_type: str = "text/plain; charset=utf-8"

    def to_response(self) -> Response:
        return Response(body=self.body, status=self.status, content_type=self.content_type)


INTERNAL_ERROR = Translation(status=500, body=INTERNAL_ERROR_MESSAGE)


class ErrorTaxonomy:
    """The fixed set of validation messages an app exposes to clients.

    Usage::

        taxonomy = ErrorTaxonomy(["field missing", "name taken"])
        translation = taxonomy.translate(failure)
    """

    __slots__ = ("messages",)

    def __init__(self, messages: Iterable[str] = ()) -> None:
        if isinstance(messages, str):
            messages = (messages,)
        self.messages: frozenset[str] = frozenset(messages)

    def __contains__(self, msg: object) -> bool:
        return msg in self.messages

    def translate(self, failure: BaseException) -> Translation:
        """Map *failure* to a status and body. Pure apart from logging."""
        if not isinstance(failure, ValidationFailure):
            logger.error("unexpected failure: %r", failure, exc_info=failure)
            return INTERNAL_ERROR

        unknown = [entry for entry in failure.errors if entry.msg not in self.messages]
        if unknown:
            logger.error(
                "unrecognized validation messages %s in %s",
                ", ".join(repr(entry.msg) for entry in unknown),
                [entry.to_dict() for entry in failure.errors],
            )
            return INTERNAL_ERROR

        body = json.dumps([entry.to_dict() for entry in failure.errors], default=str)
        return Translation(status=400, body=body, content_type="application/json")
