"""``ottoman routes`` — list compiled routes.

Prints METHOD, PATH and the schema field each route serves, including the
fixed webhook endpoints.
"""

import argparse
import sys

from ottoman.cli._resolve import resolve_app


def run_routes(args: argparse.Namespace) -> None:
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    base = app.config.base_path
    rows: list[tuple[str, str, str]] = [
        (", ".join(sorted(route.methods)), f"{base}{route.path}", route.name or "")
        for route in app.ottoman.router.routes
    ]
    if not rows:
        print("No routes registered.")
        return

    max_methods = max(6, *(len(r[0]) for r in rows))
    max_path = max(4, *(len(r[1]) for r in rows))
    fmt = f"{{:<{max_methods}}}  {{:<{max_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "FIELD"))
    sep_len = max_methods + max_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for methods_str, path, name in rows:
        print(fmt.format(methods_str, path, name))
