"""Plugins: reusable bundles of routes, hooks and middleware.

A plugin reference is resolved to a ``PluginDescriptor`` by
``PluginResolver``. References may be a literal mapping, a factory
function, an importable name, or a mapping that redirects through
``"pkg"`` or ``"fn"``.
"""

from trellis.plugins.descriptor import PluginDescriptor
from trellis.plugins.lookup import import_lookup
from trellis.plugins.resolver import (
    Factory,
    FunctionRedirect,
    Indirect,
    Literal,
    PackageRedirect,
    PluginResolver,
    classify_ref,
    enter_requires,
)
from trellis.plugins.scoped import collect_route_hooks

__all__ = [
    "Factory",
    "FunctionRedirect",
    "Indirect",
    "Literal",
    "PackageRedirect",
    "PluginDescriptor",
    "PluginResolver",
    "classify_ref",
    "collect_route_hooks",
    "enter_requires",
    "import_lookup",
]
