"""Trellis: declarative route trees and hook pipelines over ASGI.

Describe an API as a nested tree. Groups carry hooks that wrap every
route below them; plugins contribute routes, global hooks and middleware.

Basic usage::

    from trellis import App, affirm

    def ensure_name(ctx):
        affirm("name" in ctx.data, "field missing", {"field": "name"})

    app = App(
        errors=["field missing"],
        routes={
            "/user": {
                "before": ensure_name,
                "post /create": lambda ctx: {"created": ctx.data["name"]},
            },
        },
        start_immediately=False,
    )

    app.run()
"""

__version__ = "0.1.0"
__all__ = [
    "App",
    "AppConfig",
    "ConfigurationError",
    "ErrorEntry",
    "HTTPError",
    "Middleware",
    "Next",
    "NothingSentError",
    "PluginDescriptor",
    "Reply",
    "Request",
    "RequestContext",
    "Response",
    "TrellisError",
    "ValidationFailure",
    "affirm",
    "affirm_error",
]


def __getattr__(name: str) -> object:
    """Lazy imports for public API.

    Keeps ``import trellis`` from pulling in the server stack.
    """
    if name == "App":
        from trellis.app import App

        return App

    if name == "AppConfig":
        from trellis.config import AppConfig

        return AppConfig

    if name in ("Request", "Response", "Reply"):
        import trellis.http

        return getattr(trellis.http, name)

    if name in ("Middleware", "Next"):
        import trellis.middleware

        return getattr(trellis.middleware, name)

    if name == "RequestContext":
        from trellis.pipeline.context import RequestContext

        return RequestContext

    if name == "PluginDescriptor":
        from trellis.plugins.descriptor import PluginDescriptor

        return PluginDescriptor

    if name in ("ErrorEntry", "affirm", "affirm_error"):
        import trellis.validation

        return getattr(trellis.validation, name)

    if name in (
        "ConfigurationError",
        "HTTPError",
        "NothingSentError",
        "TrellisError",
        "ValidationFailure",
    ):
        import trellis.errors

        return getattr(trellis.errors, name)

    msg = f"module 'trellis' has no attribute {name!r}"
    raise AttributeError(msg)
