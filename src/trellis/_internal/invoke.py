"""Invoke helpers: call sync or async hooks uniformly.

Hooks, handlers and lifecycle callbacks can be ``def`` or ``async def``.
The sync/async check lives here so the pipeline, the event registry and
the plugin applier all suspend at hook boundaries the same way.

Usage::

    from trellis._internal.invoke import invoke

    result = await invoke(hook, ctx)
"""

import inspect
from typing import Any


async def invoke(func: Any, *args: Any, **kwargs: Any) -> Any:
    """Call *func* and await the result if it is awaitable.

    The caller is suspended until an async hook settles, so consecutive
    hooks never overlap::

        def ensure_name(ctx):
            affirm("name" in ctx.data, "field missing", {"field": "name"})

        async def load_user(ctx):
            ctx.user = await store.find(ctx.data["name"])
    """
    result = func(*args, **kwargs)
    if inspect.isawaitable(result):
        result = await result
    return result
