"""
JSON and text logging formatters for evacuation diagnostics.

Logs go to stderr so that pod listings written to stdout stay machine readable.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import json
import logging
import sys
from datetime import datetime, timezone

from nodeevac.settings import ENABLE_JSON_LOGS, LOG_LEVEL

# Attributes callers may attach with ``extra=`` that are promoted into JSON entries
CONTEXT_FIELDS = ("node", "pod")


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        :param record: Log record to format
        :return: JSON formatted log string
        """
        log_entry = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        for field in CONTEXT_FIELDS:
            value = getattr(record, field, None)
            if value is not None:
                log_entry[field] = value

        if record.exc_info:
            log_entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(log_entry)


def setup_logging(log_level: str = None, enable_json_logs: bool = None) -> None:
    """Configure the root logger with a single stderr handler.

    :param log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
    :param enable_json_logs: Enable JSON formatted logs
    """
    _log_level = LOG_LEVEL if log_level is None else log_level
    _enable_json_logs = ENABLE_JSON_LOGS if enable_json_logs is None else enable_json_logs

    root_logger = logging.getLogger()
    root_logger.handlers.clear()

    handler = logging.StreamHandler(sys.stderr)
    if _enable_json_logs:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(
            logging.Formatter(
                fmt="[%(asctime)s] %(levelname)s: %(message)s", datefmt="%Y-%m-%d %H:%M:%S"
            )
        )

    root_logger.setLevel(getattr(logging, _log_level.upper(), logging.INFO))
    root_logger.addHandler(handler)

    # The kubernetes client logs every request body at DEBUG
    logging.getLogger("kubernetes").setLevel(max(root_logger.level, logging.INFO))
