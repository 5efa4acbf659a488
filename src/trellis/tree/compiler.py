"""Route tree compiler.

Walks a classified route tree depth-first, carrying the inherited method,
path and hook chains, and emits one ``CompiledRoute`` per handler::

    routes = {
        "/user": {
            "before": [ensure_name],
            "after": [audit],
            "post /create": {"fn": create_user, "before": hash_password},
        },
    }

compiles to ``POST /user/create`` with before ``[ensure_name,
hash_password]`` and after ``[audit]``. Ancestor before-hooks run first;
ancestor after-hooks run last, unwinding like a call stack.

The compiler does not touch the global registry. Global hooks are added
around each route when the app assembles pipelines at finalization.
"""

from collections.abc import Callable, Iterable
from dataclasses import dataclass
from typing import Any, TypeAlias

from trellis.errors import ClassificationError, ConfigurationError
from trellis.tree.keys import join_path, parse_route_key
from trellis.tree.nodes import Direct, Extended, Group, Node, classify

Hooks: TypeAlias = tuple[Callable[..., Any], ...]

# Resolves a node's route-level plugin references to (before, after) hooks
PluginHooks: TypeAlias = Callable[[Iterable[Any]], tuple[Hooks, Hooks]]


@dataclass(frozen=True, slots=True)
class CompiledRoute:
    """A flattened leaf of a route tree.

    ``before`` holds inherited hooks outer-to-inner followed by the local
    ones; ``after`` holds the local hooks followed by inherited ones
    inner-to-outer.
    """

    method: str
    path: str
    handler: Callable[..., Any]
    before: Hooks = ()
    after: Hooks = ()

    @property
    def steps(self) -> Hooks:
        """The route's own chain: before hooks, handler, after hooks."""
        return (*self.before, self.handler, *self.after)


@dataclass(frozen=True, slots=True)
class _Scope:
    """What a subtree inherits from its ancestors."""

    method: str = "GET"
    path: str = "/"
    before: Hooks = ()
    after: Hooks = ()


class RouteTreeCompiler:
    """Compiles route trees and accumulates the results.

    One compiler serves the whole app: the top-level tree and every
    plugin's tree land in the same ``routes`` list, in compilation order.
    Duplicate ``(method, path)`` pairs are kept; the dispatcher decides
    which one answers.
    """

    __slots__ = ("_plugin_hooks", "_routes")

    def __init__(self, plugin_hooks: PluginHooks | None = None) -> None:
        self._plugin_hooks = plugin_hooks
        self._routes: list[CompiledRoute] = []

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        return tuple(self._routes)

    def compile(self, tree: Any, *, where: str = "routes") -> list[CompiledRoute]:
        """Compile one route tree. Returns the routes it added.

        Nothing is recorded if any part of the tree is malformed.
        """
        root = classify(tree, where=where)
        if not isinstance(root, Group):
            msg = f"{where} must be a mapping of route keys, got {tree!r}"
            raise ClassificationError(msg)
        compiled: list[CompiledRoute] = []
        self._walk(root, _Scope(), compiled, where)
        self._routes.extend(compiled)
        return compiled

    def _walk(self, group: Group, scope: _Scope, out: list[CompiledRoute], where: str) -> None:
        plugin_before, plugin_after = self._resolve_plugins(group.plugin, where)
        before = (*scope.before, *plugin_before, *group.before)
        after = (*group.after, *plugin_after, *scope.after)

        for key, child in group.children:
            method, path = parse_route_key(key)
            child_scope = _Scope(
                method=method or scope.method,
                path=join_path(scope.path, path),
                before=before,
                after=after,
            )
            child_where = f"{where}[{key!r}]"
            if isinstance(child, Group):
                self._walk(child, child_scope, out, child_where)
            else:
                out.append(self._leaf(child, child_scope, child_where))

    def _leaf(self, node: Node, scope: _Scope, where: str) -> CompiledRoute:
        if isinstance(node, Direct):
            return CompiledRoute(scope.method, scope.path, node.fn, scope.before, scope.after)
        assert isinstance(node, Extended)
        plugin_before, plugin_after = self._resolve_plugins(node.plugin, where)
        return CompiledRoute(
            method=scope.method,
            path=scope.path,
            handler=node.fn,
            before=(*scope.before, *plugin_before, *node.before),
            after=(*node.after, *plugin_after, *scope.after),
        )

    def _resolve_plugins(self, refs: tuple[Any, ...], where: str) -> tuple[Hooks, Hooks]:
        if not refs:
            return (), ()
        if self._plugin_hooks is None:
            msg = f"{where} declares route-level plugins but no plugin resolver is configured"
            raise ConfigurationError(msg)
        return self._plugin_hooks(refs)
