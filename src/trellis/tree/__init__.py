"""Route trees: declarative nested route specs compiled into flat routes.

A route tree is a mapping of ``"[method] path"`` keys to handlers,
extended handlers (``{"fn": ..., "before": ..., "after": ...}``) or nested
groups. ``RouteTreeCompiler`` flattens it into ``CompiledRoute`` values,
each carrying its inherited hook chain.
"""

from trellis.tree.compiler import CompiledRoute, RouteTreeCompiler
from trellis.tree.keys import join_path, parse_route_key
from trellis.tree.nodes import Direct, Extended, Group, classify

__all__ = [
    "CompiledRoute",
    "Direct",
    "Extended",
    "Group",
    "RouteTreeCompiler",
    "classify",
    "join_path",
    "parse_route_key",
]
