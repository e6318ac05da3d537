"""``fastrest routes``: print the route table."""

import argparse
import sys

from fastrest.cli._resolve import resolve_app


def run_routes(args: argparse.Namespace) -> None:
    """Print METHOD, PATH and handler for every route, in registration order."""
    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    routes = app.router.routes
    if not routes:
        print("No routes registered.")
        return

    rows: list[tuple[str, str, str]] = []
    for route in routes:
        handler = route.handler
        name = handler if isinstance(handler, str) else getattr(handler, "__qualname__", repr(handler))
        rows.append((route.method, route.path, name))

    width_method = max(6, *(len(r[0]) for r in rows))
    width_path = max(4, *(len(r[1]) for r in rows))

    fmt = f"{{:<{width_method}}}  {{:<{width_path}}}  {{}}"
    print(fmt.format("METHOD", "PATH", "HANDLER"))
    sep_len = width_method + width_path + 4 + max(len(r[2]) for r in rows)
    print("-" * min(sep_len, 80))
    for method, path, name in rows:
        print(fmt.format(method, path, name))
