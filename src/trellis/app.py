"""Trellis application class.

Mutable during setup: plugins and route trees can be applied until the
app is finalized. Finalization assembles one pipeline per compiled route
against the global hooks as they stand at that moment, registers the
pipelines with the dispatcher, and freezes everything.
"""

import asyncio
import logging
import threading
from collections.abc import Awaitable, Callable, Mapping
from typing import Any

import uvicorn

from trellis._internal.asgi import Receive, Scope, Send
from trellis._internal.invoke import invoke
from trellis.config import AppConfig
from trellis.hooks import EventRegistry
from trellis.middleware.body import JSONBody
from trellis.pipeline.executor import Pipeline, PipelineHandler
from trellis.pipeline.taxonomy import ErrorTaxonomy
from trellis.plugins.descriptor import PluginDescriptor
from trellis.plugins.lookup import import_lookup
from trellis.plugins.resolver import PluginResolver, enter_requires
from trellis.plugins.scoped import collect_route_hooks
from trellis.server.dispatcher import Dispatcher
from trellis.tree.compiler import CompiledRoute, RouteTreeCompiler
from trellis.tree.nodes import as_refs

logger = logging.getLogger("trellis.app")

# Phases a dependency must wrap from the outside
_OUTER_PHASES = ("before_acc", "before")


async def _settle(awaitable: Awaitable[Any]) -> Any:
    return await awaitable


async def _serve(server: uvicorn.Server, host: str, port: int) -> None:
    # uvicorn reports a failed bind by calling sys.exit(1) inside the task
    try:
        await server.serve()
    except SystemExit as exc:
        msg = f"could not bind {host}:{port}"
        raise OSError(msg) from exc


class App:
    """The trellis application.

    Construction applies everything in a fixed order: config, error
    taxonomy, events, plugins, ``plugin_done``, routes, ``routes_done``,
    and finally (unless ``start_immediately=False``) starts listening::

        app = App(
            errors=["field missing"],
            routes={"/hello": lambda ctx: "hi"},
            start_immediately=False,
        )

    The app is an ASGI application. It is finalized on the first request,
    on ASGI lifespan startup, or by ``listen()``.

    Thread safety:
        Setup is single-threaded. The freeze transition uses a Lock +
        double-check so exactly one thread assembles the pipelines when
        several workers hit the app at once.
    """

    __slots__ = (
        "_compiler",
        "_dispatcher",
        "_freeze_lock",
        "_frozen",
        "_pending_events",
        "_port",
        "_resolver",
        "_server",
        "_server_task",
        "_startup",
        "config",
        "events",
        "plugins",
        "taxonomy",
    )

    def __init__(
        self,
        *,
        plugin: Any = None,
        config: AppConfig | Mapping[str, Any] | None = None,
        errors: Any = (),
        events: Mapping[str, Any] | None = None,
        routes: Mapping[str, Any] | None = None,
        start_immediately: bool = True,
        lookup: Callable[[str], Any] = import_lookup,
        dispatcher: Dispatcher | None = None,
    ) -> None:
        if isinstance(config, AppConfig):
            self.config = config
        else:
            self.config = AppConfig.from_mapping(config or {})
        self.taxonomy = ErrorTaxonomy(errors)
        self.events = EventRegistry(events)

        self._dispatcher = dispatcher or Dispatcher()
        self._dispatcher.use(JSONBody())
        self._resolver = PluginResolver(lookup)
        self._compiler = RouteTreeCompiler(self._route_plugin_hooks)
        self.plugins: list[PluginDescriptor] = []

        self._frozen = False
        self._freeze_lock = threading.Lock()
        self._pending_events: list[asyncio.Task[Any]] = []
        self._server: uvicorn.Server | None = None
        self._server_task: asyncio.Task[None] | None = None
        self._startup: asyncio.Task[int] | None = None
        self._port: int | None = None

        self.apply_plugin(plugin)
        self._fire("plugin_done", self)
        self.apply_routes(routes)
        self._fire("routes_done", self)

        if start_immediately:
            self.start()

    # -- Setup --

    def apply_routes(self, tree: Mapping[str, Any] | None) -> list[CompiledRoute]:
        """Compile a route tree into the app. Returns the routes it added."""
        self._check_not_frozen()
        if tree is None:
            return []
        return self._compiler.compile(tree)

    def apply_plugin(self, refs: Any) -> list[PluginDescriptor]:
        """Resolve and apply one plugin reference or a list of them, in order.

        Returns the descriptors applied, dependencies included.
        """
        self._check_not_frozen()
        applied: list[PluginDescriptor] = []
        for ref in as_refs(refs):
            self._apply(ref, applied, ())
        return applied

    def _apply(
        self, ref: Any, applied: list[PluginDescriptor], chain: tuple[Any, ...]
    ) -> None:
        chain = enter_requires(ref, chain)
        descriptor = self._resolver.resolve(ref)
        marks = {phase: len(self.events[phase]) for phase in _OUTER_PHASES}

        for dependency in descriptor.requires:
            self._apply(dependency, applied, chain)

        if descriptor.routes:
            self._compiler.compile(descriptor.routes, where=f"plugin {ref!r} routes")
        for factory in descriptor.middleware:
            self._dispatcher.use(factory())
        for callback in descriptor.onconac:
            self._setup_call(callback, self, descriptor)
        for callback in descriptor.onapp:
            self._setup_call(callback, self._dispatcher, descriptor)

        # Later plugins run first; dependencies stay in front of their dependents
        for phase in _OUTER_PHASES:
            added = len(self.events[phase]) - marks[phase]
            self.events[phase].insert_front(getattr(descriptor, phase), offset=added)
        self.events.after.insert_front(descriptor.after)
        self.events.after_acc.insert_front(descriptor.after_acc)

        self.plugins.append(descriptor)
        applied.append(descriptor)
        logger.debug("applied plugin %r", ref)

    def _route_plugin_hooks(self, refs: Any) -> Any:
        return collect_route_hooks(refs, resolver=self._resolver)

    def _setup_call(self, callback: Callable[..., Any], *args: Any) -> None:
        result = callback(*args)
        if isinstance(result, Awaitable):
            self._spawn(result)

    # -- Lifecycle events --

    async def call_event(self, phase: str, *args: Any) -> None:
        """Run every hook registered for *phase*, in order."""
        await self.events.call(phase, *args)

    def _fire(self, phase: str, *args: Any) -> None:
        self._spawn(self.events.call(phase, *args))

    def _spawn(self, awaitable: Awaitable[Any]) -> None:
        """Run *awaitable* now, or schedule it on the running loop.

        Scheduled work is awaited by ``ready()``.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            private = asyncio.new_event_loop()
            try:
                private.run_until_complete(_settle(awaitable))
            finally:
                private.close()
            return
        self._pending_events.append(loop.create_task(_settle(awaitable)))

    async def ready(self) -> None:
        """Wait for lifecycle hooks scheduled during construction to finish."""
        while self._pending_events:
            await self._pending_events.pop(0)

    # -- Finalization --

    def finalize(self) -> None:
        """Assemble and register every pipeline. Idempotent."""
        if self._frozen:
            return
        with self._freeze_lock:
            if self._frozen:
                return
            self._freeze()

    def _freeze(self) -> None:
        """MUST only be called while holding _freeze_lock."""
        routes = self._compiler.routes
        for route in routes:
            pipeline = Pipeline.assemble(route, self.events)
            handler = PipelineHandler(pipeline, self.taxonomy, self.events)
            self._dispatcher.register(route.method, route.path, handler)
        self._dispatcher.compile()
        self._frozen = True
        logger.debug("finalized %d routes", len(routes))

    @property
    def frozen(self) -> bool:
        return self._frozen

    @property
    def routes(self) -> tuple[CompiledRoute, ...]:
        """Every compiled route, top-level and plugin trees alike."""
        return self._compiler.routes

    @property
    def dispatcher(self) -> Dispatcher:
        return self._dispatcher

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        """ASGI 3.0 entry point."""
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return
        self.finalize()
        await self._dispatcher(scope, receive, send)

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        while True:
            message = await receive()
            if message["type"] == "lifespan.startup":
                try:
                    self.finalize()
                    await self.ready()
                except Exception as exc:
                    logger.exception("startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})
            elif message["type"] == "lifespan.shutdown":
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Serving --

    @property
    def port(self) -> int | None:
        """The bound port while listening."""
        return self._port

    async def listen(self, port: int | None = None) -> int:
        """Start serving in the background and return the bound port.

        Returns once the socket is bound, after the ``listen`` hooks have
        run with that port. Pass ``port=0`` to bind any free port. Raises
        ``OSError`` when the port cannot be bound.
        """
        if self._server is not None:
            msg = f"Already listening on port {self._port}"
            raise RuntimeError(msg)
        self.finalize()
        await self.ready()

        host = self.config.host
        port = self.config.port if port is None else port
        server = uvicorn.Server(
            uvicorn.Config(
                self,
                host=host,
                port=port,
                log_level=self.config.log_level,
                log_config=None,
                lifespan="on",
            )
        )
        task = asyncio.create_task(_serve(server, host, port))
        while not server.started:
            if task.done():
                task.result()
                msg = "Server stopped before binding its socket"
                raise RuntimeError(msg)
            await asyncio.sleep(0.01)

        self._server = server
        self._server_task = task
        self._port = server.servers[0].sockets[0].getsockname()[1]
        await self.events.call("listen", self._port)
        return self._port

    async def close(self) -> None:
        """Stop a server started by ``listen()`` or ``start()``."""
        if self._startup is not None:
            startup, self._startup = self._startup, None
            await startup
        if self._server is None or self._server_task is None:
            return
        self._server.should_exit = True
        try:
            await self._server_task
        finally:
            self._server = None
            self._server_task = None
            self._port = None

    def run(self, port: int | None = None) -> None:
        """Serve until interrupted. Blocks."""

        async def serve() -> None:
            await self.listen(port)
            assert self._server_task is not None
            try:
                await self._server_task
            finally:
                self._server = None
                self._server_task = None
                self._port = None

        asyncio.run(serve())

    def start(self, port: int | None = None) -> None:
        """Listen on the running loop if there is one, otherwise block in ``run()``."""
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            self.run(port)
            return
        self._startup = loop.create_task(self.listen(port))

    # -- Internal --

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has been finalized. "
                "Apply plugins and routes before the first request or listen()."
            )
            raise RuntimeError(msg)
