# daymap/logging_config.py
"""
Stderr logging configuration.

The MCP server speaks over stdio, so its logs go to stderr as JSON lines.
The CLI uses a short human-readable format on stderr so stdout stays
pipeable.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

VERBOSITY_LEVELS = {
    "quiet": logging.WARNING,
    "normal": logging.INFO,
    "verbose": logging.DEBUG,
}


class JsonFormatter(logging.Formatter):
    """Formats log records as JSON for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON line."""
        log_data: dict[str, Any] = {
            "ts": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }

        if record.exc_info:
            log_data["exc"] = self.formatException(record.exc_info)

        return json.dumps(log_data)


def configure_logging(json_format: bool = True, verbosity: str = "normal") -> None:
    """
    Configure root logging to stderr only.

    Clears existing handlers to prevent stdout pollution.

    Args:
        json_format: JSON lines (server) or human-readable lines (CLI)
        verbosity: quiet, normal or verbose
    """
    handler = logging.StreamHandler(sys.stderr)
    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s  %(levelname)-7s  %(message)s", datefmt="%H:%M:%S")
        )

    level = VERBOSITY_LEVELS.get(verbosity, logging.INFO)

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    # Route chatty third-party loggers through the same handler
    for logger_name in ["httpx", "fastmcp"]:
        logger = logging.getLogger(logger_name)
        logger.handlers.clear()
        logger.addHandler(handler)
        logger.setLevel(max(level, logging.WARNING))
        logger.propagate = False
