"""Structured logging for the ``model_expires`` logger namespace.

Only loggers under ``model_expires`` get a handler; the host application's
root logger is left as it is.
"""

import sys
import structlog
import logging
from pathlib import Path
from model_expires.core.config import Settings

LOGGER_NAMESPACE = "model_expires"
HANDLER_NAME = "model_expires"

# Applied to structlog events and to plain stdlib records alike
SHARED_PROCESSORS = [
    structlog.stdlib.add_logger_name,
    structlog.stdlib.add_log_level,
    structlog.processors.StackInfoRenderer(),
    structlog.processors.format_exc_info,
]


def _build_handler(settings: Settings) -> logging.Handler:
    if settings.log_file:
        log_path = Path(settings.log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handler = logging.FileHandler(log_path)
    else:
        handler = logging.StreamHandler(sys.stderr)

    if settings.log_format == "json":
        timestamper = structlog.processors.TimeStamper(fmt="iso")
        renderer = structlog.processors.JSONRenderer()
    else:
        timestamper = structlog.processors.TimeStamper(fmt="%H:%M:%S")
        renderer = structlog.dev.ConsoleRenderer(
            colors=False,
            exception_formatter=structlog.dev.plain_traceback
        )

    handler.setFormatter(structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=[timestamper, *SHARED_PROCESSORS],
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, renderer],
    ))
    handler.set_name(HANDLER_NAME)
    return handler


def configure_logging(settings: Settings) -> logging.Logger:
    """Attach a handler for ``settings`` to the package logger and return it.

    Calling it again replaces the handler installed by the previous call.
    """
    package_logger = logging.getLogger(LOGGER_NAMESPACE)
    for existing in list(package_logger.handlers):
        if existing.get_name() == HANDLER_NAME:
            package_logger.removeHandler(existing)
            existing.close()

    package_logger.addHandler(_build_handler(settings))
    package_logger.setLevel(settings.log_level)
    package_logger.propagate = False

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            structlog.processors.TimeStamper(fmt="iso" if settings.log_format == "json" else "%H:%M:%S"),
            *SHARED_PROCESSORS,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
    return package_logger


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """Get a structured logger instance."""
    return structlog.get_logger(name)


def log_expiration_query(logger: structlog.stdlib.BoundLogger, operation: str,
                         model: str, count: int, **kwargs) -> None:
    """Log an expiration-filtered query."""
    logger.debug(
        "Expiration query",
        operation=operation,
        model=model,
        count=count,
        **kwargs
    )
