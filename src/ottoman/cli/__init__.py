"""Ottoman CLI — serve a schema or list its compiled routes.

Entry point registered as ``ottoman`` in ``pyproject.toml``::

    [project.scripts]
    ottoman = "ottoman.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``ottoman`` command."""
    parser = argparse.ArgumentParser(
        prog="ottoman",
        description="Ottoman — a GraphQL schema served as a REST API.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- ottoman run ------------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Start the server")
    run_parser.add_argument("app", help="Import string (e.g. myapi:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument("--reload", action="store_true", help="Restart on code changes")

    # -- ottoman routes ---------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List compiled routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapi:app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from ottoman.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from ottoman.cli._routes import run_routes

        run_routes(args)
