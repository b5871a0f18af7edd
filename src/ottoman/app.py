"""Standalone ASGI application hosting an ``Ottoman`` middleware.

Mutable during setup (middleware, startup/shutdown hooks). Frozen when
``run()`` or ``__call__()`` is first invoked.
"""

import inspect
import logging
from collections.abc import Callable
from typing import Any

from ottoman._internal.asgi import Receive, Scope, Send
from ottoman.dispatch import Ottoman
from ottoman.middleware.protocol import Middleware, Next
from ottoman.server.handler import build_chain, handle_request

logger = logging.getLogger("ottoman.server")


class App:
    """ASGI 3.0 application serving an ``Ottoman`` route table.

    Usage::

        ottoman = Ottoman(schema=schema, base_path="/api")
        app = App(ottoman)
        app.run()

    Requests no middleware answers get a JSON 404. On lifespan shutdown
    every webhook subscription is stopped.
    """

    __slots__ = (
        "_chain",
        "_frozen",
        "_middleware_list",
        "_shutdown_hooks",
        "_startup_hooks",
        "ottoman",
    )

    def __init__(self, ottoman: Ottoman) -> None:
        self.ottoman = ottoman
        self._middleware_list: list[Middleware] = []
        self._startup_hooks: list[Callable[..., Any]] = []
        self._shutdown_hooks: list[Callable[..., Any]] = []
        self._chain: Next | None = None
        self._frozen: bool = False

    @property
    def config(self) -> Any:
        return self.ottoman.config

    # -- Registration --

    def add_middleware(self, middleware: Middleware) -> None:
        """Add middleware that runs before the ottoman routes."""
        self._check_not_frozen()
        self._middleware_list.append(middleware)

    def on_startup(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run at ASGI lifespan startup."""
        self._check_not_frozen()
        self._startup_hooks.append(func)
        return func

    def on_shutdown(self, func: Callable[..., Any]) -> Callable[..., Any]:
        """Register a sync or async hook run at ASGI lifespan shutdown."""
        self._check_not_frozen()
        self._shutdown_hooks.append(func)
        return func

    # -- Server --

    def run(self, host: str | None = None, port: int | None = None) -> None:
        """Serve the app with pounce."""
        self._ensure_frozen()
        from ottoman.server.dev import run_server

        run_server(
            self,
            host or self.config.host,
            port or self.config.port,
            reload=self.config.debug,
        )

    # -- ASGI interface --

    async def __call__(self, scope: Scope, receive: Receive, send: Send) -> None:
        if scope["type"] == "lifespan":
            await self._handle_lifespan(receive, send)
            return

        self._ensure_frozen()
        assert self._chain is not None

        await handle_request(scope, receive, send, chain=self._chain, debug=self.config.debug)

    async def startup(self) -> None:
        for hook in self._startup_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result

    async def shutdown(self) -> None:
        for hook in self._shutdown_hooks:
            result = hook()
            if inspect.isawaitable(result):
                await result
        await self.ottoman.aclose()

    async def _handle_lifespan(self, receive: Receive, send: Send) -> None:
        self._ensure_frozen()

        while True:
            message = await receive()
            msg_type = message["type"]

            if msg_type == "lifespan.startup":
                try:
                    await self.startup()
                except Exception as exc:
                    logger.exception("Startup failed")
                    await send({"type": "lifespan.startup.failed", "message": str(exc)})
                    return
                await send({"type": "lifespan.startup.complete"})

            elif msg_type == "lifespan.shutdown":
                await self.shutdown()
                await send({"type": "lifespan.shutdown.complete"})
                return

    # -- Internal --

    def _ensure_frozen(self) -> None:
        if self._frozen:
            return
        self._chain = build_chain((*self._middleware_list, self.ottoman))
        self._frozen = True

    def _check_not_frozen(self) -> None:
        if self._frozen:
            msg = (
                "Cannot modify the app after it has started serving requests. "
                "Register middleware and hooks before calling app.run()."
            )
            raise RuntimeError(msg)
