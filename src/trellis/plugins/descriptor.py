"""Canonical plugin descriptor."""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field
from typing import Any, TypeAlias

from trellis.errors import PluginResolutionError
from trellis.hooks import as_hooks, check_phase_names
from trellis.tree.nodes import as_refs

Hooks: TypeAlias = tuple[Callable[..., Any], ...]

_FIELDS = (
    "middleware",
    "onapp",
    "onconac",
    "before",
    "after",
    "before_acc",
    "after_acc",
    "requires",
    "routes",
)


@dataclass(frozen=True, slots=True)
class PluginDescriptor:
    """A fully resolved plugin.

    Every hook field is a tuple of callables. ``middleware`` holds
    zero-argument factories. ``requires`` holds unresolved references,
    applied before this plugin. ``options`` keeps every other key,
    including parameters merged in during resolution.
    """

    middleware: Hooks = ()
    onapp: Hooks = ()
    onconac: Hooks = ()
    before: Hooks = ()
    after: Hooks = ()
    before_acc: Hooks = ()
    after_acc: Hooks = ()
    requires: tuple[Any, ...] = ()
    routes: Mapping[str, Any] = field(default_factory=dict)
    options: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "PluginDescriptor":
        """Build a descriptor from a merged plugin mapping."""
        check_phase_names(values, where="plugin")
        routes = values.get("routes") or {}
        if not isinstance(routes, Mapping):
            msg = f"plugin 'routes' must be a mapping, got {routes!r}"
            raise PluginResolutionError(msg)
        hooks = {
            name: as_hooks(values.get(name), where=f"plugin {name!r}")
            for name in _FIELDS
            if name not in ("requires", "routes")
        }
        return cls(
            **hooks,
            requires=as_refs(values.get("requires")),
            routes=routes,
            options={key: value for key, value in values.items() if key not in _FIELDS},
        )

    def get(self, key: str, default: Any = None) -> Any:
        """Read a plugin option."""
        return self.options.get(key, default)

    @property
    def has_hooks_only(self) -> bool:
        """True when the plugin only contributes ``before``/``after`` hooks."""
        return not (
            self.routes
            or self.middleware
            or self.onapp
            or self.onconac
            or self.before_acc
            or self.after_acc
        )
