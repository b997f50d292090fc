import logging.config
from typing import Any

from config.settings import settings

LOGGING_CONFIG: dict[str, Any] = {
    "version": 1,
    "disable_existing_loggers": False,
    "formatters": {
        "standard": {
            "format": "%(asctime)s [%(levelname)s] %(name)s: %(message)s",
            "datefmt": "%Y-%m-%d %H:%M:%S",
        },
    },
    "handlers": {
        "console": {
            "class": "logging.StreamHandler",
            "formatter": "standard",
            "stream": "ext://sys.stdout",
        },
    },
    "loggers": {
        # SQL echo is controlled by DEBUG on the engine, not here
        "sqlalchemy.engine": {"level": "WARNING"},
        "om.request": {"level": "INFO"},
    },
    "root": {"handlers": ["console"]},
}


def configure_logging(level: str | None = None) -> None:
    """Install the console handler and set the root level (LOG_LEVEL by default)."""
    config = {**LOGGING_CONFIG, "root": {**LOGGING_CONFIG["root"]}}
    config["root"]["level"] = (level or settings.LOG_LEVEL).upper()
    logging.config.dictConfig(config)
