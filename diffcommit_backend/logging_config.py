"""Logging setup for the Diff & Commit backend"""

from __future__ import annotations

import logging.config
import os

LOG_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


def build_logging_config(level: str | None = None) -> dict:
    """Return a dictConfig mapping for console logging"""
    level = (level or os.environ.get("DIFFCOMMIT_LOG_LEVEL", "INFO")).upper()
    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {"console": {"format": LOG_FORMAT}},
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "formatter": "console",
            }
        },
        "loggers": {
            "diffcommit_backend": {"handlers": ["console"], "level": level, "propagate": False},
        },
        "root": {"handlers": ["console"], "level": "WARNING"},
    }


def configure_logging(level: str | None = None) -> None:
    """Apply the console logging configuration"""
    logging.config.dictConfig(build_logging_config(level))


__all__ = ["build_logging_config", "configure_logging"]
