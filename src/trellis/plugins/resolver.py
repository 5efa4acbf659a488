"""Plugin reference resolution.

A reference is classified into one of five variants, then resolved
recursively into a ``PluginDescriptor``:

``Indirect``
    A string. Looked up through the injected lookup, then resolved again.
``Factory``
    A callable. Called with the accumulated params; its result is
    resolved again with the same params.
``PackageRedirect``
    A mapping with ``"pkg"``. ``pkg`` is resolved with params updated by
    the mapping's other fields (the mapping wins).
``FunctionRedirect``
    A mapping with ``"fn"``. ``fn`` is called with the mapping itself; the
    result is resolved with the mapping's fields updated by the incoming
    params (the params win).
``Literal``
    Any other mapping, or a ``PluginDescriptor``. Merged over the params
    and returned.

Resolution has no side effects. Depth is bounded so a cyclic chain of
references fails with ``PluginResolutionError`` instead of recursing
forever.
"""

from collections.abc import Callable, Mapping
from dataclasses import dataclass, field, fields
from typing import Any, TypeAlias

from trellis.errors import PluginResolutionError
from trellis.plugins.descriptor import PluginDescriptor
from trellis.plugins.lookup import import_lookup

DEFAULT_MAX_DEPTH = 32


@dataclass(frozen=True, slots=True)
class Literal:
    values: Mapping[str, Any]


@dataclass(frozen=True, slots=True)
class Factory:
    fn: Callable[..., Any]


@dataclass(frozen=True, slots=True)
class Indirect:
    name: str


@dataclass(frozen=True, slots=True)
class PackageRedirect:
    pkg: Any
    overrides: Mapping[str, Any] = field(default_factory=dict)


@dataclass(frozen=True, slots=True)
class FunctionRedirect:
    fn: Callable[..., Any]
    source: Mapping[str, Any] = field(default_factory=dict)


PluginRef: TypeAlias = Literal | Factory | Indirect | PackageRedirect | FunctionRedirect


def _descriptor_values(descriptor: PluginDescriptor) -> dict[str, Any]:
    values = {f.name: getattr(descriptor, f.name) for f in fields(descriptor) if f.name != "options"}
    values.update(descriptor.options)
    return values


def classify_ref(ref: Any) -> PluginRef:
    """Classify a raw plugin reference into its variant."""
    if isinstance(ref, str):
        return Indirect(ref)
    if isinstance(ref, PluginDescriptor):
        return Literal(_descriptor_values(ref))
    if callable(ref):
        return Factory(ref)
    if isinstance(ref, Mapping):
        if ref.get("pkg"):
            return PackageRedirect(ref["pkg"], {k: v for k, v in ref.items() if k != "pkg"})
        if ref.get("fn"):
            if not callable(ref["fn"]):
                msg = f"plugin 'fn' must be callable, got {ref['fn']!r}"
                raise PluginResolutionError(msg)
            return FunctionRedirect(ref["fn"], dict(ref))
        return Literal(ref)
    msg = f"unrecognized plugin reference {ref!r}"
    raise PluginResolutionError(msg)


class PluginResolver:
    """Resolves plugin references with an injected name lookup.

    Usage::

        resolver = PluginResolver()
        descriptor = resolver.resolve("myproject.plugins.cors", {"origin": "*"})
    """

    __slots__ = ("_lookup", "max_depth")

    def __init__(
        self,
        lookup: Callable[[str], Any] = import_lookup,
        *,
        max_depth: int = DEFAULT_MAX_DEPTH,
    ) -> None:
        self._lookup = lookup
        self.max_depth = max_depth

    def resolve(self, ref: Any, params: Mapping[str, Any] | None = None) -> PluginDescriptor:
        """Resolve *ref* to a descriptor, merging *params* into its options."""
        return self._resolve(ref, dict(params or {}), 0)

    def _resolve(self, ref: Any, params: dict[str, Any], depth: int) -> PluginDescriptor:
        if depth > self.max_depth:
            msg = (
                f"plugin resolution exceeded {self.max_depth} levels "
                f"(cyclic reference?) at {ref!r}"
            )
            raise PluginResolutionError(msg)

        match classify_ref(ref):
            case Indirect(name):
                try:
                    target = self._lookup(name)
                except PluginResolutionError:
                    raise
                except Exception as exc:
                    msg = f"cannot resolve plugin {name!r}: {exc}"
                    raise PluginResolutionError(msg) from exc
                return self._resolve(target, params, depth + 1)
            case Factory(fn):
                return self._resolve(fn(dict(params)), params, depth + 1)
            case PackageRedirect(pkg, overrides):
                return self._resolve(pkg, {**params, **overrides}, depth + 1)
            case FunctionRedirect(fn, source):
                merged = {k: v for k, v in source.items() if k != "fn"}
                return self._resolve(fn(source), {**merged, **params}, depth + 1)
            case Literal(values):
                return PluginDescriptor.from_mapping({**params, **values})
        raise AssertionError("unreachable")


def _label(ref: Any) -> str:
    if isinstance(ref, str):
        return repr(ref)
    return getattr(ref, "__name__", None) or f"<{type(ref).__name__} at {id(ref):#x}>"


def enter_requires(ref: Any, chain: tuple[Any, ...]) -> tuple[Any, ...]:
    """Extend the chain of plugins being applied with *ref*.

    Strings are compared by value and anything else by identity. Raises
    ``PluginResolutionError`` when *ref* is already being applied further
    up the chain, since its ``requires`` would never finish.
    """
    key = ref if isinstance(ref, str) else id(ref)
    for index, active in enumerate(chain):
        if (active if isinstance(active, str) else id(active)) == key:
            cycle = " -> ".join(_label(r) for r in (*chain[index:], ref))
            msg = f"cyclic requires: {cycle}"
            raise PluginResolutionError(msg)
    return (*chain, ref)
