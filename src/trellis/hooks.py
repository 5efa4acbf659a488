"""Global hook registry.

Eight fixed phases hold ordered hook lists:

- ``before_acc`` / ``after_acc``: raw hooks, called as ``hook(request, reply)``
  around every route pipeline
- ``before`` / ``after``: per-field hooks, called as ``hook(ctx)`` at the
  outer edges of every route pipeline
- ``plugin_done`` / ``routes_done`` / ``listen`` / ``error``: lifecycle
  callbacks

Plugins add hooks with ``HookList.insert_front``: the most recently
applied plugin's hooks run first, in every phase. The registry is only
mutated while plugins are applied; route pipelines snapshot it when the
app is finalized and never read it again.
"""

import logging
from collections.abc import Callable, Iterable, Iterator, Mapping
from typing import Any

from trellis._internal.invoke import invoke
from trellis.errors import ClassificationError, ConfigurationError

logger = logging.getLogger("trellis.app")

ROUTE_PHASES = ("before_acc", "before", "after", "after_acc")
LIFECYCLE_PHASES = ("routes_done", "plugin_done", "listen", "error")
PHASES = ROUTE_PHASES + LIFECYCLE_PHASES

_SPELLINGS = {
    "beforeAcc": "before_acc",
    "afterAcc": "after_acc",
    "routesDone": "routes_done",
    "pluginDone": "plugin_done",
}


def check_phase_names(names: Iterable[str], *, where: str) -> None:
    """Reject camelCase spellings of the built-in phases.

    They would otherwise be taken as a custom phase or a plugin option and
    their hooks would never run.
    """
    for name in names:
        if name in _SPELLINGS:
            msg = f"unknown key {name!r} in {where}; did you mean {_SPELLINGS[name]!r}?"
            raise ConfigurationError(msg)


def as_hooks(value: Any, *, where: str = "hook") -> tuple[Callable[..., Any], ...]:
    """Normalize ``None``, one callable, or a sequence of callables to a tuple.

    Raises ``ClassificationError`` for anything that is not callable.
    """
    if value is None:
        return ()
    if callable(value):
        return (value,)
    if isinstance(value, (str, bytes, Mapping)) or not isinstance(value, Iterable):
        msg = f"{where} must be a callable or a list of callables, got {value!r}"
        raise ClassificationError(msg)
    hooks = tuple(value)
    for hook in hooks:
        if not callable(hook):
            msg = f"{where} entries must be callable, got {hook!r}"
            raise ClassificationError(msg)
    return hooks


class HookList:
    """An ordered list of hooks with insert-at-front semantics.

    ``insert_front`` keeps the relative order of the inserted hooks, so
    applying ``[a, b]`` and then ``[c]`` yields ``[c, a, b]``.
    """

    __slots__ = ("_hooks",)

    def __init__(self, hooks: Iterable[Callable[..., Any]] = ()) -> None:
        self._hooks: list[Callable[..., Any]] = list(hooks)

    def insert_front(self, hooks: Iterable[Callable[..., Any]], *, offset: int = 0) -> None:
        """Insert *hooks* ahead of the existing ones.

        *offset* skips that many leading hooks, which lets a plugin slot its
        own hooks in behind the ones its dependencies just inserted.
        """
        self._hooks[offset:offset] = list(hooks)

    def append(self, hook: Callable[..., Any]) -> None:
        self._hooks.append(hook)

    def snapshot(self) -> tuple[Callable[..., Any], ...]:
        """Immutable copy of the current order."""
        return tuple(self._hooks)

    def __iter__(self) -> Iterator[Callable[..., Any]]:
        return iter(tuple(self._hooks))

    def __len__(self) -> int:
        return len(self._hooks)

    def __repr__(self) -> str:
        names = ", ".join(getattr(h, "__name__", repr(h)) for h in self._hooks)
        return f"HookList([{names}])"


def _log_listening(port: int) -> None:
    logger.info("listening on port %d", port)


class EventRegistry:
    """Per-app hook lists, one per phase.

    The phase set is fixed at construction: the eight built-in phases plus
    any custom phase named in *events*. Hook contents stay mutable until
    the app is finalized.
    """

    __slots__ = ("_lists",)

    def __init__(self, events: Mapping[str, Any] | None = None) -> None:
        events = dict(events or {})
        check_phase_names(events, where="events")
        events.setdefault("listen", _log_listening)
        self._lists: dict[str, HookList] = {
            phase: HookList(as_hooks(events.pop(phase, None), where=f"events[{phase!r}]"))
            for phase in PHASES
        }
        for phase, hooks in events.items():
            self._lists[phase] = HookList(as_hooks(hooks, where=f"events[{phase!r}]"))

    def __getitem__(self, phase: str) -> HookList:
        try:
            return self._lists[phase]
        except KeyError:
            msg = f"Unknown event phase {phase!r}. Known phases: {', '.join(self._lists)}"
            raise ConfigurationError(msg) from None

    def __contains__(self, phase: object) -> bool:
        return phase in self._lists

    @property
    def phases(self) -> tuple[str, ...]:
        return tuple(self._lists)

    # -- Shorthands for the route phases --

    @property
    def before_acc(self) -> HookList:
        return self._lists["before_acc"]

    @property
    def before(self) -> HookList:
        return self._lists["before"]

    @property
    def after(self) -> HookList:
        return self._lists["after"]

    @property
    def after_acc(self) -> HookList:
        return self._lists["after_acc"]

    async def call(self, phase: str, *args: Any) -> None:
        """Run every hook of *phase* in order, awaiting each one."""
        for hook in self[phase]:
            await invoke(hook, *args)
