"""
Environment variable parsing and configuration management for NodeEvac.

SPDX-License-Identifier: Apache-2.0
Copyright 2025 Sebastian Daberdaku
"""

import os


def _get_bool_env(key: str, default: bool) -> bool:
    """Get boolean environment variable.

    :param key: Environment variable name
    :param default: Default value if not set
    :return: Boolean value
    """
    value = os.getenv(key, str(default)).lower()
    return value in ("true", "1", "yes", "on")


def _parse_int(int_str: str | None, default: int) -> int:
    """Parse an integer setting, falling back to the default on bad input.

    :param int_str: String holding an integer (e.g., "30", "-1")
    :param default: Value used when the string is unset or not an integer
    :return: Parsed integer
    """
    if int_str is None or not int_str.strip():
        return default
    try:
        return int(int_str.strip())
    except ValueError:
        return default


def _parse_list(list_str: str) -> list[str]:
    """Parse comma-separated string into list.

    Supports formats:
    - str1,str2,str3
    - Empty string (returns empty list)

    :param list_str: Comma-separated string
    :return: List of strings
    """
    return [f.strip() for f in list_str.split(",") if f.strip()]


"""NodeEvac Settings"""
DRY_RUN = _get_bool_env("DRY_RUN", False)
FORCE = _get_bool_env("FORCE", False)
GRACE_PERIOD_SECONDS = _parse_int(os.getenv("GRACE_PERIOD_SECONDS"), 30)
POD_SELECTOR = os.getenv("POD_SELECTOR", "").strip()
NODE_NAMES = _parse_list(os.getenv("NODE_NAMES", ""))
NODE_LABEL_SELECTOR = os.getenv("NODE_LABEL_SELECTOR", "").strip()
OUTPUT_FORMAT = os.getenv("OUTPUT_FORMAT", "table").strip().lower()
SLACK_WEBHOOK_URL = os.getenv("SLACK_WEBHOOK_URL")
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO").upper()
ENABLE_JSON_LOGS = _get_bool_env("ENABLE_JSON_LOGS", False)
CLUSTER_NAME = os.getenv("CLUSTER_NAME", "unknown")
