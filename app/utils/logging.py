"""Logging configuration utilities."""

import logging
import logging.config
from pathlib import Path
from typing import Dict, Any, Optional

from app.settings import Settings, get_settings


def get_logging_config(settings: Optional[Settings] = None) -> Dict[str, Any]:
    """
    Get logging configuration dictionary.

    Returns:
        Logging configuration for dictConfig
    """
    settings = settings or get_settings()
    formatter = "json" if settings.log_format == "json" else "standard"

    return {
        "version": 1,
        "disable_existing_loggers": False,
        "formatters": {
            "standard": {
                "format": "%(asctime)s - %(name)s - %(levelname)s - %(message)s",
                "datefmt": "%Y-%m-%d %H:%M:%S",
            },
            "json": {
                "class": "pythonjsonlogger.jsonlogger.JsonFormatter",
                "format": "%(asctime)s %(name)s %(levelname)s %(message)s",
            },
        },
        "handlers": {
            "console": {
                "class": "logging.StreamHandler",
                "level": settings.log_level,
                "formatter": formatter,
                "stream": "ext://sys.stdout",
            },
            "file": {
                "class": "logging.handlers.RotatingFileHandler",
                "level": settings.log_level,
                "formatter": formatter,
                "filename": str(Path(settings.log_dir) / "storefront.log"),
                "maxBytes": 10485760,
                "backupCount": 10,
            },
        },
        "loggers": {
            "app": {
                "level": settings.log_level,
                "handlers": ["console", "file"],
                "propagate": False,
            },
            "sqlalchemy.engine": {
                "level": "WARNING",
                "handlers": ["console"],
                "propagate": False,
            },
            "passlib": {
                "level": "ERROR",
                "handlers": ["console"],
                "propagate": False,
            },
        },
        "root": {
            "level": settings.log_level,
            "handlers": ["console"],
        },
    }


def setup_logging(settings: Optional[Settings] = None) -> None:
    """Setup logging configuration."""
    settings = settings or get_settings()
    Path(settings.log_dir).mkdir(parents=True, exist_ok=True)

    logging.config.dictConfig(get_logging_config(settings))

    logger = logging.getLogger("app")
    logger.info("Logging configured successfully")
