"""Path patterns.

Route paths use the colon syntax the route trees are written in:

- ``/users/:id`` captures one segment as ``id``
- ``/files/:name?`` makes the last segment optional
- ``/static/*`` captures the rest of the path under the key ``"0"``

Matching ignores case and a single trailing slash. Captured values are
percent-decoded and always strings.
"""

import re
from dataclasses import dataclass
from urllib.parse import unquote

from trellis.errors import ConfigurationError

_PARAM = re.compile(r"^:([A-Za-z_][A-Za-z0-9_]*)(\?)?$")

WILDCARD_KEY = "0"


@dataclass(frozen=True, slots=True)
class PathPattern:
    """A compiled route path."""

    path: str
    regex: re.Pattern[str]
    keys: tuple[str, ...]

    def match(self, path: str) -> dict[str, str] | None:
        """Captured parameters when *path* matches, else ``None``."""
        found = self.regex.match(path)
        if found is None:
            return None
        return {
            key: unquote(value)
            for key, value in zip(self.keys, found.groups(), strict=True)
            if value is not None
        }


def compile_path(path: str) -> PathPattern:
    """Compile a route path into a :class:`PathPattern`.

    Raises ``ConfigurationError`` for malformed parameters, repeated
    parameter names, or a wildcard anywhere but the last segment.
    """
    parts = [part for part in path.split("/") if part]
    keys: list[str] = []
    pattern = ""
    for index, part in enumerate(parts):
        if part == "*":
            if index != len(parts) - 1:
                msg = f"wildcard must be the last segment in route path {path!r}"
                raise ConfigurationError(msg)
            keys.append(WILDCARD_KEY)
            pattern += "/(.*)"
            continue
        if part.startswith(":"):
            param = _PARAM.match(part)
            if param is None:
                msg = f"invalid parameter {part!r} in route path {path!r}"
                raise ConfigurationError(msg)
            name, optional = param.groups()
            if name in keys:
                msg = f"parameter {name!r} repeated in route path {path!r}"
                raise ConfigurationError(msg)
            keys.append(name)
            pattern += "(?:/([^/]+))?" if optional else "/([^/]+)"
            continue
        pattern += "/" + re.escape(part)

    regex = re.compile(f"^{pattern}/?$", re.IGNORECASE)
    return PathPattern(path=path, regex=regex, keys=tuple(keys))
