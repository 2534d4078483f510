"""Logging setup.

Components log through ``logging.getLogger(__name__)`` and attach
context with ``extra={...}``. This module wires the root logger once,
either with the plain text format or with a JSON formatter that keeps
those ``extra`` fields.
"""

from __future__ import annotations

import json
import logging
import sys
from typing import Any, Dict, Optional

from .config import ObservabilityConfig, get_config

# Attributes every LogRecord carries; anything else came from ``extra``.
_RESERVED_ATTRS = frozenset(
    vars(logging.LogRecord("", 0, "", 0, "", (), None)).keys()
) | {"message", "asctime"}


class JsonFormatter(logging.Formatter):
    """One JSON object per line, including ``extra`` context."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "time": self.formatTime(record, self.datefmt),
            "logger": record.name,
            "level": record.levelname,
            "message": record.getMessage(),
        }
        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def configure_logging(config: Optional[ObservabilityConfig] = None) -> None:
    """Install a stdout handler on the root logger.

    Existing root handlers are removed so repeated calls do not
    duplicate output.

    Args:
        config: Logging configuration, defaults to the app config.
    """
    config = config or get_config().observability

    handler = logging.StreamHandler(sys.stdout)
    if config.structured:
        handler.setFormatter(JsonFormatter(datefmt="%Y-%m-%dT%H:%M:%S"))
    else:
        handler.setFormatter(
            logging.Formatter(config.format, datefmt="%Y-%m-%d %H:%M:%S")
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(config.level.upper())
    root_logger.handlers.clear()
    root_logger.addHandler(handler)

    # httpx logs every request URL at INFO, and those URLs carry API keys.
    logging.getLogger("httpx").setLevel(logging.WARNING)

    logging.getLogger(__name__).debug(
        "Logging configured",
        extra={"level": config.level, "structured": config.structured},
    )
