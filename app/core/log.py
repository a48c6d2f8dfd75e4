"""
Logging
"""

# pyright: basic

import logging
import sys

from asgi_correlation_id.context import correlation_id
from loguru import logger

from app.core.config import settings
from app.schema.log_entry import LogEntry

__all__ = (
    "log_serializer",
    "logger",
    "sink",
    "uvicorn_log_config",
)

_LEVEL = "DEBUG" if settings.DEBUG else "INFO"


class InterceptHandler(logging.Handler):
    """Route stdlib logging records (uvicorn, httpx, fastmcp) into loguru."""

    def emit(self, record):
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        # Find caller to get correct stack depth
        frame, depth = logging.currentframe(), 2
        while frame.f_back and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


uvicorn_log_config = {
    "version": 1,
    "disable_existing_loggers": False,
    "handlers": {
        "intercept": {
            "()": InterceptHandler,
        },
    },
    "loggers": {
        "uvicorn": {"handlers": ["intercept"], "level": "INFO", "propagate": False},
        "uvicorn.access": {"handlers": ["intercept"], "level": "INFO", "propagate": False},
        "uvicorn.error": {"handlers": ["intercept"], "level": "ERROR", "propagate": False},
    },
    "root": {"handlers": ["intercept"], "level": _LEVEL},
}


def log_serializer(record) -> str:
    """
    Serialize a loguru record as one JSON line
    """

    message = record["message"]
    if len(message) > settings.LOG_MESSAGE_MAX_LEN:
        message = message[: settings.LOG_MESSAGE_MAX_LEN - 3] + "..."

    if record["exception"] is not None:
        exc_type, exc_value, _ = record["exception"]
        if exc_type is not None:
            message = f"{message} [{exc_type.__name__}: {exc_value}]"

    log_entry = LogEntry(
        asctime=record["time"],
        levelname=record["level"].name,
        correlation_id=correlation_id.get() or "",
        name=record["name"] or "",
        message=message,
    )

    return log_entry.model_dump_json()


def sink(message) -> None:
    """
    Custom sink for loguru
    """
    # stdout belongs to the MCP protocol when serving over stdio
    stream = sys.stderr if settings.TRANSPORT == "stdio" else sys.stdout
    print(log_serializer(message.record), file=stream)


logger.remove()

logger.add(
    sink,
    level=_LEVEL,
)


logging.basicConfig(handlers=[InterceptHandler()], level=logging.INFO)
