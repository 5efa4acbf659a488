"""Request pipelines: the per-route hook chain and its error handling."""

from trellis.pipeline.context import RawExchange, RequestContext, RouteMeta
from trellis.pipeline.executor import Pipeline, PipelineHandler, render_result
from trellis.pipeline.steps import CONTINUE, Complete, Continue, StepResult, run_steps, step_result
from trellis.pipeline.taxonomy import ErrorTaxonomy, Translation

__all__ = [
    "CONTINUE",
    "Complete",
    "Continue",
    "ErrorTaxonomy",
    "Pipeline",
    "PipelineHandler",
    "RawExchange",
    "RequestContext",
    "RouteMeta",
    "StepResult",
    "Translation",
    "render_result",
    "run_steps",
    "step_result",
]
