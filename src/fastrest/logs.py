"""Logging setup for fastrest applications.

fastrest modules log through named stdlib loggers and attach structured
data under ``extra={"context": {...}}``:

    fastrest.data      failed or echoed statements
    fastrest.request   request/response lines from ``RequestLogger``
    fastrest.server    HTTP errors converted at the pipeline boundary

``configure_logging`` installs one handler on the ``fastrest`` logger that
renders that context as ``key=value`` pairs (text) or as a JSON object.
"""

import json
import logging
import sys
import traceback
from datetime import UTC, datetime
from typing import Any

from fastrest.config import AppConfig

ROOT_LOGGER = "fastrest"


def _context(record: logging.LogRecord) -> dict[str, Any]:
    context = getattr(record, "context", None)
    return context if isinstance(context, dict) else {}


class JSONFormatter(logging.Formatter):
    """One JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        data: dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        context = _context(record)
        if context:
            data["context"] = context
        if record.exc_info:
            data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": traceback.format_exception(*record.exc_info),
            }
        return json.dumps(data, default=str)


class TextFormatter(logging.Formatter):
    """Human-readable lines with the context appended as ``key=value``."""

    def __init__(self) -> None:
        super().__init__(
            fmt="%(asctime)s %(levelname)-7s %(name)s: %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            pairs = " ".join(f"{key}={value!r}" for key, value in context.items())
            line = f"{line} [{pairs}]" if "\n" not in line else line.replace("\n", f" [{pairs}]\n", 1)
        return line


def configure_logging(
    config: AppConfig | None = None,
    *,
    stream: Any = None,
) -> logging.Logger:
    """Install a handler on the ``fastrest`` logger and return it.

    Uses ``config.log_level``, ``config.log_format`` and ``config.log_file``
    (stderr, or *stream*, when no file is set). Calling it again replaces
    the handler it installed before.
    """
    config = config or AppConfig()
    logger = logging.getLogger(ROOT_LOGGER)

    for handler in list(logger.handlers):
        if getattr(handler, "_fastrest_handler", False):
            logger.removeHandler(handler)
            handler.close()

    handler: logging.Handler
    if config.log_file:
        handler = logging.FileHandler(config.log_file, encoding="utf-8")
    else:
        handler = logging.StreamHandler(stream or sys.stderr)
    handler.setFormatter(JSONFormatter() if config.log_format == "json" else TextFormatter())
    handler._fastrest_handler = True  # type: ignore[attr-defined]

    logger.addHandler(handler)
    logger.setLevel(config.log_level.upper())
    return logger
