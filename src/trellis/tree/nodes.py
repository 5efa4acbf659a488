"""Route tree node variants and the classifier that builds them.

Authors write plain values; ``classify`` turns them into one of three
frozen variants at load time:

- a callable is a ``Direct`` handler
- a mapping with an ``"fn"`` key is an ``Extended`` handler
- any other mapping is a ``Group``; every key except ``before``,
  ``after`` and ``plugin`` is a child route

Anything else is rejected with ``ClassificationError`` before a single
route is registered.
"""

from collections.abc import Callable, Iterable, Mapping
from dataclasses import dataclass
from typing import Any, TypeAlias

from trellis.errors import ClassificationError
from trellis.hooks import as_hooks

_GROUP_FIELDS = frozenset({"before", "after", "plugin"})
_EXTENDED_FIELDS = _GROUP_FIELDS | {"fn"}


@dataclass(frozen=True, slots=True)
class Direct:
    """A bare handler."""

    fn: Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Extended:
    """A handler with its own local hooks and route-level plugins."""

    fn: Callable[..., Any]
    before: tuple[Callable[..., Any], ...] = ()
    after: tuple[Callable[..., Any], ...] = ()
    plugin: tuple[Any, ...] = ()


@dataclass(frozen=True, slots=True)
class Group:
    """A subtree: shared hooks, route-level plugins and keyed children."""

    before: tuple[Callable[..., Any], ...] = ()
    after: tuple[Callable[..., Any], ...] = ()
    plugin: tuple[Any, ...] = ()
    children: tuple[tuple[str, "Node"], ...] = ()


Node: TypeAlias = Direct | Extended | Group


def as_refs(value: Any) -> tuple[Any, ...]:
    """Normalize a plugin field (``None``, one reference, or a list) to a tuple."""
    if value is None:
        return ()
    if isinstance(value, (list, tuple)):
        return tuple(value)
    return (value,)


def classify(node: Any, *, where: str = "routes") -> Node:
    """Classify a raw route tree node, recursing into groups.

    *where* names the node in error messages (e.g. ``routes['/user']``).
    """
    if callable(node):
        return Direct(node)

    if not isinstance(node, Mapping):
        msg = f"unrecognized handler type for {where}: {node!r}"
        raise ClassificationError(msg)

    if "fn" in node:
        unknown = set(node) - _EXTENDED_FIELDS
        if unknown:
            msg = f"unknown fields {sorted(map(str, unknown))} in extended handler {where}"
            raise ClassificationError(msg)
        if not callable(node["fn"]):
            msg = f"{where}['fn'] must be callable, got {node['fn']!r}"
            raise ClassificationError(msg)
        return Extended(
            fn=node["fn"],
            before=as_hooks(node.get("before"), where=f"{where}['before']"),
            after=as_hooks(node.get("after"), where=f"{where}['after']"),
            plugin=as_refs(node.get("plugin")),
        )

    return Group(
        before=as_hooks(node.get("before"), where=f"{where}['before']"),
        after=as_hooks(node.get("after"), where=f"{where}['after']"),
        plugin=as_refs(node.get("plugin")),
        children=tuple(_classify_children(node, where)),
    )


def _classify_children(node: Mapping[Any, Any], where: str) -> Iterable[tuple[str, Node]]:
    for key, child in node.items():
        if key in _GROUP_FIELDS:
            continue
        if not isinstance(key, str):
            msg = f"route keys must be strings, got {key!r} in {where}"
            raise ClassificationError(msg)
        yield key, classify(child, where=f"{where}[{key!r}]")
