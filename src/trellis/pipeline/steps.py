"""Step results.

Every hook and handler in a pipeline returns either ``None`` (carry on)
or a value (stop here and send it). The executor turns each return value
into an explicit ``StepResult`` and inspects it; there is no control flow
by exception.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, Final, TypeAlias

from trellis._internal.invoke import invoke


class Continue:
    """The step produced nothing; run the next one."""

    __slots__ = ()

    def __repr__(self) -> str:
        return "CONTINUE"


CONTINUE: Final = Continue()


@dataclass(frozen=True, slots=True)
class Complete:
    """The step produced *value*; the rest of the pipeline is skipped."""

    value: Any


StepResult: TypeAlias = Continue | Complete


def step_result(value: Any) -> StepResult:
    """Only ``None`` continues. ``0``, ``False`` and ``""`` all complete."""
    if value is None:
        return CONTINUE
    return Complete(value)


async def run_steps(steps: Iterable[Callable[..., Any]], *args: Any) -> StepResult:
    """Run *steps* in order until one completes.

    Each step is awaited before the next one starts.
    """
    for step in steps:
        result = step_result(await invoke(step, *args))
        if isinstance(result, Complete):
            return result
    return CONTINUE
