"""
Centralized Logging

Architectural Intent:
- Provides human-readable or structured JSON logging for all cumulus components
- Centralizes log configuration so library modules only call getLogger(__name__)
- Supports configurable log levels via CLI flags (--verbose, --debug) or the
  log_level config key
"""

import json
import logging
import sys
from datetime import datetime, UTC
from typing import Union

ROOT_LOGGER = "cumulus"


class JSONFormatter(logging.Formatter):
    """Structured JSON log formatter."""

    def format(self, record: logging.LogRecord) -> str:
        log_entry = {
            "timestamp": datetime.fromtimestamp(record.created, UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        if record.exc_info and record.exc_info[1]:
            log_entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(log_entry)


def resolve_level(level: Union[int, str]) -> int:
    """Accept a logging constant or a level name such as "debug"."""
    if isinstance(level, int):
        return level
    value = logging.getLevelName(level.strip().upper())
    if not isinstance(value, int):
        raise ValueError(f"Unknown log level: {level!r}")
    return value


def configure_logging(
    level: Union[int, str] = logging.INFO,
    json_format: bool = False,
) -> None:
    """Configure the cumulus logger hierarchy.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, etc.) or its name.
        json_format: If True, use JSON structured output. Otherwise human-readable.
    """
    numeric_level = resolve_level(level)
    root = logging.getLogger(ROOT_LOGGER)
    root.setLevel(numeric_level)

    # Remove existing handlers
    root.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    handler.setLevel(numeric_level)

    if json_format:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s")
        )

    root.addHandler(handler)
