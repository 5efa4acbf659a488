"""Application configuration.

AppConfig is a frozen dataclass, immutable after creation, IDE-autocompletable.
Keys the framework does not know about are kept in ``extra`` so plugins
can read their own settings from the same config object.
"""

from collections.abc import Mapping
from dataclasses import dataclass, field, fields
from typing import Any


@dataclass(frozen=True, slots=True)
class AppConfig:
    """Application configuration. Immutable after creation.

    All fields have defaults. Override what you need::

        config = AppConfig(port=3000)
        config = AppConfig.from_mapping({"port": 3000, "db_url": "sqlite://"})
    """

    # Server
    host: str = "127.0.0.1"
    port: int = 8080
    log_level: str = "info"

    # Anything else handed to App(config={...})
    extra: Mapping[str, Any] = field(default_factory=dict)

    @classmethod
    def from_mapping(cls, values: Mapping[str, Any]) -> "AppConfig":
        """Build a config from a plain mapping, routing unknown keys to ``extra``."""
        known = {f.name for f in fields(cls)} - {"extra"}
        kwargs = {key: value for key, value in values.items() if key in known}
        extra = {key: value for key, value in values.items() if key not in known}
        return cls(**kwargs, extra=extra)

    def get(self, key: str, default: Any = None) -> Any:
        """Read a known field or an ``extra`` key by name."""
        if key != "extra" and key in {f.name for f in fields(self)}:
            return getattr(self, key)
        return self.extra.get(key, default)
