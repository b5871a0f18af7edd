"""Serve an ottoman App with pounce.

Pounce's ``run()`` takes an import string, but we already hold a live
ASGI callable, so ``pounce.Server`` is used directly.
"""


def run_server(
    app: object,
    host: str,
    port: int,
    *,
    reload: bool = False,
    app_path: str | None = None,
) -> None:
    """Start a single-worker pounce server for *app*.

    Args:
        app: ASGI callable (ottoman App instance).
        host: Bind host address.
        port: Bind port number.
        reload: Restart on source changes (development only).
        app_path: Optional ``"module:attribute"`` import string. Pounce
            re-imports it on reload so code changes take effect.
    """
    from pounce.config import ServerConfig
    from pounce.server import Server

    config = ServerConfig(host=host, port=port, workers=1, reload=reload)
    server = Server(config, app, app_path=app_path)
    server.run()
