"""
Logging configuration.

`src/routepick/config/logging.yaml` holds the handlers and formatters. Levels come from
settings: `app.log_level` (or `ROUTEPICK_LOG_LEVEL`) for the root logger and console
handler, `app.logger_levels` for individual loggers such as `routepick.session` or `httpx`.
"""

from __future__ import annotations

import copy
import logging.config
from typing import Any

from routepick.config.settings import AppSettings, get_logging_config, get_settings


def build_logging_config(app: AppSettings) -> dict[str, Any]:
    """Merge the packaged dictConfig with the levels from `app` settings."""
    config = copy.deepcopy(get_logging_config())

    level = app.log_level.upper()
    config.setdefault("root", {})["level"] = level
    console = config.get("handlers", {}).get("console")
    if isinstance(console, dict):
        console["level"] = level

    loggers = config.setdefault("loggers", {})
    for name, logger_level in app.logger_levels.items():
        loggers.setdefault(name, {})["level"] = logger_level.upper()
    return config


def configure_logging() -> None:
    logging.config.dictConfig(build_logging_config(get_settings().app))
