"""Route key parsing and path joining."""

import posixpath
import re

from trellis.errors import RouteKeyError

# An HTTP method token: letters, optionally hyphenated ("M-SEARCH")
_METHOD = re.compile(r"^[A-Za-z]+(?:-[A-Za-z]+)*$")


def parse_route_key(key: str) -> tuple[str | None, str]:
    """Split a ``"[method] path"`` key into ``(method, path)``.

    One space-separated token is a bare path and the method is inherited
    (``None``). Two tokens are an explicit method and a path; the method
    is upper-cased and passed to the dispatcher as written, so extension
    methods such as ``PURGE`` work too. Anything else is a
    ``RouteKeyError``::

        parse_route_key("/user")          -> (None, "/user")
        parse_route_key("post /create")   -> ("POST", "/create")
    """
    tokens = key.split(" ")
    if len(tokens) == 1:
        return None, tokens[0]
    if len(tokens) == 2:
        method, path = tokens
        if not _METHOD.match(method):
            msg = f'invalid method "{method}" in route key "{key}"'
            raise RouteKeyError(msg)
        return method.upper(), path
    msg = f'invalid path for "{key}"'
    raise RouteKeyError(msg)


def join_path(base: str, path: str) -> str:
    """Join two path segments POSIX-style into a normalized absolute path.

    ``join_path("/a", "b")``, ``join_path("/a/", "/b/")`` and
    ``join_path("/a", "//b")`` are all ``"/a/b"``.
    """
    joined = posixpath.normpath("/" + "/".join(part.strip("/") for part in (base, path)))
    # normpath keeps a leading "//" (POSIX leaves it implementation-defined)
    return "/" + joined.lstrip("/")
