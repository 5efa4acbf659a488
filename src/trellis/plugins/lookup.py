"""Default lookup for plugins referenced by name.

``"package.module"`` imports the module and uses its ``plugin``
attribute; ``"package.module:name"`` uses the named attribute instead.
"""

import logging
from importlib import import_module
from typing import Any

from trellis.errors import PluginResolutionError

logger = logging.getLogger("trellis.app")


def import_lookup(name: str) -> Any:
    """Import the plugin object referenced by *name*."""
    module_name, _, attribute = name.partition(":")
    try:
        module = import_module(module_name)
    except Exception as exc:
        logger.error(
            "plugin %r could not be imported. Make sure it is installed "
            "and imports without errors",
            name,
        )
        msg = f"cannot import plugin {name!r}: {exc}"
        raise PluginResolutionError(msg) from exc

    attribute = attribute or "plugin"
    try:
        return getattr(module, attribute)
    except AttributeError as exc:
        msg = f"plugin module {module_name!r} has no attribute {attribute!r}"
        raise PluginResolutionError(msg) from exc
