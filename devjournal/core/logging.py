"""Structured logging: structlog rendered through stdlib logging handlers."""

from __future__ import annotations

import logging
import logging.config
import os

import structlog

# Third-party loggers that are too chatty at the business log level.
_QUIET_LOGGERS: dict[str, str] = {
    "uvicorn.access": "WARNING",
    "uvicorn.error": "INFO",
    "sqlalchemy.engine": "WARNING",
    "asyncpg": "WARNING",
    "httpx": "WARNING",
    "httpcore": "WARNING",
}


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer(colors=False)


def setup_logging(level: str | None = None, log_format: str | None = None) -> None:
    """Configure structlog and the stdlib root logger.

    Falls back to the environment when arguments are omitted:
        DEVJOURNAL_LOG_LEVEL  — business log level (default: INFO)
        DEVJOURNAL_LOG_FORMAT — console | json (default: console)
    """
    log_level = (level or os.environ.get("DEVJOURNAL_LOG_LEVEL", "INFO")).upper()
    fmt = (log_format or os.environ.get("DEVJOURNAL_LOG_FORMAT", "console")).lower()

    pre_chain: list[structlog.types.Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_log_level,
        structlog.stdlib.add_logger_name,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
    ]

    structlog.configure(
        processors=[*pre_chain, structlog.stdlib.ProcessorFormatter.wrap_for_formatter],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    loggers = {name: {"level": lvl} for name, lvl in _QUIET_LOGGERS.items()}
    loggers["devjournal"] = {"level": log_level}

    logging.config.dictConfig(
        {
            "version": 1,
            "disable_existing_loggers": False,
            "formatters": {
                "structlog": {
                    "()": structlog.stdlib.ProcessorFormatter,
                    "foreign_pre_chain": pre_chain,
                    "processors": [
                        structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                        _renderer(fmt),
                    ],
                },
            },
            "handlers": {
                "default": {
                    "class": "logging.StreamHandler",
                    "stream": "ext://sys.stdout",
                    "formatter": "structlog",
                },
            },
            "root": {"handlers": ["default"], "level": log_level},
            "loggers": loggers,
        }
    )
