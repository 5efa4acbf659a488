"""Pipeline executor.

A ``Pipeline`` is the full, ordered chain for one compiled route::

    before_acc hooks       hook(request, reply)
    global before hooks    hook(ctx)
    inherited before hooks (outer to inner), local before hooks
    handler
    local after hooks, inherited after hooks (inner to outer)
    global after hooks     hook(ctx)
    after_acc hooks        hook(request, reply)

The first step to return something other than ``None`` ends the request
with that value. Reaching the end without a value is an authoring error.
"""

import logging
from collections.abc import Callable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from trellis._internal.invoke import invoke
from trellis.errors import NothingSentError
from trellis.hooks import EventRegistry
from trellis.http.request import Request
from trellis.http.response import Reply, Response
from trellis.pipeline.context import RequestContext
from trellis.pipeline.steps import Complete, run_steps
from trellis.pipeline.taxonomy import ErrorTaxonomy
from trellis.tree.compiler import CompiledRoute

logger = logging.getLogger("trellis.pipeline")

Hooks: TypeAlias = tuple[Callable[..., Any], ...]


@dataclass(frozen=True, slots=True)
class Pipeline:
    """The assembled chain for one ``(method, path)``."""

    method: str
    path: str
    before_acc: Hooks = ()
    steps: Hooks = ()
    after_acc: Hooks = ()

    @classmethod
    def assemble(cls, route: CompiledRoute, events: EventRegistry) -> "Pipeline":
        """Wrap *route* in the global hooks as they stand right now."""
        return cls(
            method=route.method,
            path=route.path,
            before_acc=events.before_acc.snapshot(),
            steps=(*events.before.snapshot(), *route.steps, *events.after.snapshot()),
            after_acc=events.after_acc.snapshot(),
        )

    async def execute(self, request: Request, reply: Reply) -> Any:
        """Run the chain and return the value of the step that completed it.

        Raises ``NothingSentError`` if no step produced a value.
        """
        result = await run_steps(self.before_acc, request, reply)
        if isinstance(result, Complete):
            return result.value

        ctx = RequestContext.from_request(request, reply, method=self.method, path=self.path)
        result = await run_steps(self.steps, ctx)
        if isinstance(result, Complete):
            return result.value

        result = await run_steps(self.after_acc, request, reply)
        if isinstance(result, Complete):
            return result.value

        logger.error("nothing sent for %s %s", self.method, self.path)
        raise NothingSentError(self.method, self.path)

    def __len__(self) -> int:
        return len(self.before_acc) + len(self.steps) + len(self.after_acc)


def render_result(value: Any) -> Response:
    """Turn a completed step's value into a response.

    - a ``Response`` is sent as-is
    - a mapping with a truthy ``"raw"`` entry sends that entry verbatim
    - anything else is wrapped as ``{"success": true, "data": value}``
    """
    if isinstance(value, Response):
        return value
    if isinstance(value, Mapping) and value.get("raw"):
        raw = value["raw"]
        if not isinstance(raw, (str, bytes)):
            raw = str(raw)
        return Response(body=raw)
    return Response.from_json({"success": True, "data": value})


class PipelineHandler:
    """Dispatcher handler that runs one pipeline per request.

    Failures go to the app's ``error`` hooks first, then through the error
    taxonomy. Nothing raised by the pipeline reaches the dispatcher.
    """

    __slots__ = ("events", "pipeline", "taxonomy")

    def __init__(self, pipeline: Pipeline, taxonomy: ErrorTaxonomy, events: EventRegistry) -> None:
        self.pipeline = pipeline
        self.taxonomy = taxonomy
        self.events = events

    async def __call__(self, request: Request) -> Response:
        reply = Reply()
        try:
            response = render_result(await self.pipeline.execute(request, reply))
        except Exception as exc:
            await self._report(exc)
            response = self.taxonomy.translate(exc).to_response()
        return reply.apply(response)

    async def _report(self, failure: Exception) -> None:
        for hook in self.events["error"]:
            try:
                await invoke(hook, failure)
            except Exception:
                logger.exception(
                    "error hook %r failed while reporting %r on %s %s",
                    hook,
                    failure,
                    self.pipeline.method,
                    self.pipeline.path,
                )

    def __repr__(self) -> str:
        return f"<PipelineHandler {self.pipeline.method} {self.pipeline.path}>"
