"""Central logging configuration."""
from __future__ import annotations

import logging
from logging.config import dictConfig

from src.core.config import settings


LOG_LEVEL = "DEBUG" if settings.environment == "development" else "INFO"

LOGGING_CONFIG = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s | %(levelname)s | %(name)s | %(message)s",
        }
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
        }
    },
    "loggers": {
        "renewal-mail-guard": {"level": LOG_LEVEL},
        # Per-request connection chatter stays out of debug logs.
        "urllib3": {"level": "WARNING"},
        "rq_scheduler": {"level": "INFO"},
    },
    "root": {
        "handlers": ["console"],
        "level": LOG_LEVEL,
    },
}


def configure_logging() -> None:
    """Apply the logging configuration once at application startup."""

    dictConfig(LOGGING_CONFIG)


logger = logging.getLogger("renewal-mail-guard")
