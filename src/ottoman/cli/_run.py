"""``ottoman run`` — serve an app with pounce."""

import argparse
import sys

from ottoman.cli._resolve import resolve_app


def run_server(args: argparse.Namespace) -> None:
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    from ottoman.server.dev import run_server as serve

    app._ensure_frozen()
    serve(
        app,
        args.host or app.config.host,
        args.port or app.config.port,
        reload=args.reload,
        app_path=args.app if args.reload else None,
    )
