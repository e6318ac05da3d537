"""``fastrest run``: load the environment, resolve the app, serve it."""

import argparse
import sys

from dotenv import load_dotenv

from fastrest.cli._resolve import resolve_app
from fastrest.logs import configure_logging


def run_server(args: argparse.Namespace) -> None:
    """Start uvicorn for ``args.app``.

    Variables from ``--env-file`` are loaded before the app module is
    imported, so ``AppConfig.from_env()`` at import time sees them.
    Variables already present in the environment are not overridden.
    """
    load_dotenv(args.env_file, override=False)

    try:
        app = resolve_app(args.app)
    except (ModuleNotFoundError, AttributeError, TypeError) as exc:
        print(f"Error: {exc}", file=sys.stderr)
        raise SystemExit(1) from exc

    configure_logging(app.config)
    app.run(host=args.host, port=args.port)
