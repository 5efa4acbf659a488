"""Route-level plugins.

A group or extended handler may list plugins under ``"plugin"``. Only
their ``before``/``after`` hooks apply, and only to that subtree. They
follow the same ordering rules as app-level plugins: a later plugin's
hooks run first, and a plugin's ``requires`` wrap outside it.
"""

from collections.abc import Callable, Iterable
from typing import Any, TypeAlias

from trellis.errors import ConfigurationError
from trellis.hooks import HookList
from trellis.plugins.resolver import PluginResolver, enter_requires

Hooks: TypeAlias = tuple[Callable[..., Any], ...]


def collect_route_hooks(refs: Iterable[Any], *, resolver: PluginResolver) -> tuple[Hooks, Hooks]:
    """Resolve route-level plugin references into ``(before, after)`` hooks."""
    before = HookList()
    after = HookList()

    def apply(ref: Any, chain: tuple[Any, ...]) -> None:
        chain = enter_requires(ref, chain)
        descriptor = resolver.resolve(ref)
        if not descriptor.has_hooks_only:
            msg = (
                f"route-level plugin {ref!r} may only contribute 'before' and 'after' "
                "hooks; register it on the app instead"
            )
            raise ConfigurationError(msg)
        mark = len(before)
        for dependency in descriptor.requires:
            apply(dependency, chain)
        before.insert_front(descriptor.before, offset=len(before) - mark)
        after.insert_front(descriptor.after)

    for ref in refs:
        apply(ref, ())
    return before.snapshot(), after.snapshot()
