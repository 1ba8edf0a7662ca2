"""
Logging setup for trellis.

Library modules only ever call ``logging.getLogger(__name__)``; nothing is
configured at import time. Front ends (the CLI) call ``configure_logging``
once to attach a single handler to the ``trellis`` logger.

Two output formats are supported:
- text: ``LEVEL logger: message`` for humans at a terminal
- json: one JSON object per line for log shippers (Loki, etc.)

Usage:
    from trellis.logger import configure_logging

    configure_logging(level="info", fmt="json")
"""

from __future__ import annotations

import json
import logging
import sys
from datetime import datetime, timezone
from typing import IO, Any, Dict, Optional

ROOT_LOGGER_NAME = "trellis"

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", logging.INFO, "", 0, "", None, None)).keys()
) | {"message", "asctime"}

_LEVELS: Dict[str, int] = {
    "debug": logging.DEBUG,
    "info": logging.INFO,
    "warning": logging.WARNING,
    "error": logging.ERROR,
}


class JsonFormatter(logging.Formatter):
    """Render a record as a single JSON line."""

    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname.lower(),
            "logger": record.name,
            "message": record.getMessage(),
        }

        for key, value in vars(record).items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                entry[key] = value

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


def configure_logging(
    level: str = "warning",
    fmt: str = "text",
    stream: Optional[IO[str]] = None,
) -> logging.Logger:
    """
    Attach one handler to the ``trellis`` logger.

    Calling this again replaces the previously installed handler, so the CLI
    and tests can reconfigure freely.

    Args:
        level: debug, info, warning or error
        fmt: "text" or "json"
        stream: Destination stream (defaults to stderr)

    Returns:
        The configured ``trellis`` logger
    """
    if level not in _LEVELS:
        raise ValueError(f"Unknown log level '{level}' (expected one of: {', '.join(_LEVELS)})")

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(_LEVELS[level])

    for handler in list(logger.handlers):
        if getattr(handler, "_trellis_handler", False):
            logger.removeHandler(handler)

    handler = logging.StreamHandler(stream or sys.stderr)
    if fmt == "json":
        handler.setFormatter(JsonFormatter())
    elif fmt == "text":
        handler.setFormatter(logging.Formatter("%(levelname)s %(name)s: %(message)s"))
    else:
        raise ValueError(f"Unknown log format '{fmt}' (expected 'text' or 'json')")
    handler._trellis_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)

    return logger
