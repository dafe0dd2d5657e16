"""
Logging setup for the API.

JSON lines via python-json-logger outside of debug mode; a readable
single-line format when ``DEBUG`` is on. Auth outcomes go through
``log_event`` so each one is a named event with its own fields.
"""

import logging
import sys
from typing import Any

from pythonjsonlogger import jsonlogger

from blog_api.core.config import settings

_HANDLER_NAME = "blog_api"


class CustomJsonFormatter(jsonlogger.JsonFormatter):
    """JSON formatter that stamps every record with the service identity."""

    def add_fields(
        self,
        log_record: dict[str, Any],
        record: logging.LogRecord,
        message_dict: dict[str, Any],
    ) -> None:
        super().add_fields(log_record, record, message_dict)
        log_record["service"] = settings.PROJECT_NAME
        log_record["version"] = settings.VERSION
        log_record["environment"] = settings.ENVIRONMENT
        log_record["level"] = record.levelname


def _build_formatter() -> logging.Formatter:
    if settings.DEBUG:
        return logging.Formatter(
            "%(asctime)s %(levelname)-7s [%(name)s] %(message)s",
            datefmt="%H:%M:%S",
        )
    return CustomJsonFormatter(
        "%(timestamp)s %(level)s %(name)s %(message)s",
        timestamp=True,
    )


def setup_logging() -> None:
    """
    Attach the service handler to the root logger.

    Calling it again replaces the handler instead of adding a second one.
    """
    root_logger = logging.getLogger()
    for existing in list(root_logger.handlers):
        if existing.get_name() == _HANDLER_NAME:
            root_logger.removeHandler(existing)

    handler = logging.StreamHandler(sys.stdout)
    handler.set_name(_HANDLER_NAME)
    handler.setFormatter(_build_formatter())
    root_logger.addHandler(handler)
    root_logger.setLevel(logging.DEBUG if settings.DEBUG else logging.INFO)

    # Third-party chatter
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("passlib").setLevel(logging.ERROR)


def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


def log_event(
    logger: logging.Logger,
    event: str,
    level: int = logging.INFO,
    **fields: Any,
) -> None:
    """
    Emit a named event with context fields.

    The JSON formatter turns ``extra`` into top-level keys, so ``event`` and
    each field can be filtered on directly. Never pass tokens or passwords.

    Args:
        logger: Logger to emit on
        event: Dotted event name, e.g. ``auth.login.succeeded``
        level: Logging level
        **fields: Context fields
    """
    logger.log(level, event, extra={"event": event, **fields})
