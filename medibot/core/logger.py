"""Logging configuration."""
import logging
from logging.config import dictConfig

from medibot.core.config import settings

_configured = False


def setup_logging() -> None:
    global _configured
    if _configured:
        return

    dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "default": {
                    "format": "%(asctime)s %(levelname)s [%(name)s] %(message)s",
                },
            },
            "handlers": {
                "console": {
                    "class": "logging.StreamHandler",
                    "formatter": "default",
                },
            },
            "root": {
                "handlers": ["console"],
                "level": settings.LOG_LEVEL.upper(),
            },
            "loggers": {
                "uvicorn.access": {"level": "WARNING"},
            },
        }
    )
    _configured = True
    logging.getLogger(__name__).debug("Logging configured (level=%s)", settings.LOG_LEVEL)
