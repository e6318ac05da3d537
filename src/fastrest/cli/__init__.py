"""fastrest CLI: serve an app and inspect its route table.

Entry point registered as ``fastrest`` in ``pyproject.toml``::

    [project.scripts]
    fastrest = "fastrest.cli:main"
"""

import argparse
import sys


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for the ``fastrest`` command."""
    parser = argparse.ArgumentParser(
        prog="fastrest",
        description="fastrest: a minimal async REST framework.",
    )
    subparsers = parser.add_subparsers(dest="command")

    # -- fastrest run -----------------------------------------------------
    run_parser = subparsers.add_parser("run", help="Serve an app with uvicorn")
    run_parser.add_argument("app", help="Import string (e.g. myapp:app)")
    run_parser.add_argument("--host", default=None, help="Bind host address")
    run_parser.add_argument("--port", type=int, default=None, help="Bind port number")
    run_parser.add_argument(
        "--env-file",
        default=".env",
        help="Load environment variables from this file first (default: .env)",
    )

    # -- fastrest routes --------------------------------------------------
    routes_parser = subparsers.add_parser("routes", help="List registered routes")
    routes_parser.add_argument("app", help="Import string (e.g. myapp:app)")

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        sys.exit(0)

    if args.command == "run":
        from fastrest.cli._run import run_server

        run_server(args)
    elif args.command == "routes":
        from fastrest.cli._routes import run_routes

        run_routes(args)
