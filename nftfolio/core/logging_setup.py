"""
Logging configuration for processes embedding the client.

Applies a single stdout handler on the root logger. If the root logger
already has handlers (host application, pytest), nothing is changed.
"""

from __future__ import annotations

import logging
from logging.config import dictConfig


def _dict_config(level: str) -> dict:
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "default": {
                "format": "%(asctime)s %(levelname)s:%(name)s:%(message)s",
            }
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "default",
                "stream": "ext://sys.stdout",
            }
        },
        "root": {"level": level, "handlers": ["console"]},
        "loggers": {
            # Request lines from httpx duplicate our own api_request logs.
            "httpx": {"level": "WARNING"},
        },
    }


def configure_logging(level: str = "INFO") -> bool:
    """
    Configure logging once. Returns False when handlers were already present.
    """
    root = logging.getLogger()
    if root.handlers:
        return False
    level = (level or "INFO").upper()
    if level not in logging.getLevelNamesMapping():
        level = "INFO"
    dictConfig(_dict_config(level))
    return True
