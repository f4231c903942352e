"""Logging configuration built around structlog JSON logging."""

from __future__ import annotations

import logging
import logging.config
from pathlib import Path

import structlog

_LOGGING_INITIALISED = False

LOGGER_NAME = "zincsink"


def configure_logging(verbose: bool = False, log_file: Path | None = None) -> structlog.BoundLogger:
    """Configure structlog + stdlib handlers and return the application logger."""

    global _LOGGING_INITIALISED
    if not _LOGGING_INITIALISED:
        level = "DEBUG" if verbose else "INFO"
        handlers: dict[str, dict] = {
            "console": {
                "class": "logging.StreamHandler",
                "level": level,
                "formatter": "json",
            },
        }
        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handlers["file"] = {
                "class": "logging.FileHandler",
                "level": "INFO",
                "filename": str(log_file),
                "encoding": "utf-8",
                "formatter": "json",
            }
        logging.config.dictConfig(
            {
                "version": 1,
                "disable_existing_loggers": False,
                "formatters": {
                    "json": {
                        "()": "pythonjsonlogger.json.JsonFormatter",
                        "fmt": "%(asctime)s %(levelname)s %(name)s %(message)s",
                    }
                },
                "handlers": handlers,
                "loggers": {
                    LOGGER_NAME: {
                        "handlers": list(handlers),
                        "level": level,
                        "propagate": False,
                    },
                },
            }
        )

        # Forward structlog events to stdlib logging; JSON rendering happens at handler level
        structlog.configure(
            processors=[
                structlog.contextvars.merge_contextvars,
                structlog.processors.TimeStamper(fmt="iso"),
                structlog.stdlib.add_log_level,
                structlog.processors.StackInfoRenderer(),
                structlog.processors.format_exc_info,
                structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
            ],
            logger_factory=structlog.stdlib.LoggerFactory(),
            cache_logger_on_first_use=True,
        )
        _LOGGING_INITIALISED = True
    return structlog.get_logger(LOGGER_NAME)


__all__ = ["LOGGER_NAME", "configure_logging"]
