"""Log setup for hosts embedding the rules engine.

The rules modules only ever call ``structlog.get_logger()`` and emit events
such as ``rules.combat.completed``. ``setup_logging`` decides where those
events go: a console handler and an optional rotating file, both writing one
JSON object per line.
"""

import logging
import os
from logging.handlers import RotatingFileHandler

import structlog
from structlog.contextvars import merge_contextvars

from RogueTrader.config import Settings


def _json_formatter() -> structlog.stdlib.ProcessorFormatter:
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.add_log_level,
            merge_contextvars,
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        # host records that did not come through structlog
        foreign_pre_chain=[
            structlog.processors.add_log_level,
            merge_contextvars,
        ],
    )


def _handler_level(name: str | None, default: int) -> int | None:
    """Map a level name to a logging level; None when the handler is switched off."""
    if (name or "").upper() == "NONE":
        return None
    return getattr(logging, (name or "").upper(), default)


def setup_logging(settings: Settings | None = None) -> None:
    """Route roll events to the console and, if configured, a rotating file.

    Without settings only the console handler is installed, at INFO.
    ``logging_enabled = false`` installs no handlers at all.
    """
    level_name = (settings.logging_level if settings else "INFO").upper()
    level = getattr(logging, level_name, logging.INFO)
    logging.captureWarnings(True)

    formatter = _json_formatter()
    handlers: list[logging.Handler] = []
    enabled = True if settings is None else settings.logging_enabled

    console_level = _handler_level(level_name if settings is None else settings.logging_console, level)
    if enabled and console_level is not None:
        console = logging.StreamHandler()
        console.setLevel(console_level)
        console.setFormatter(formatter)
        handlers.append(console)

    file_level = None if settings is None else _handler_level(settings.logging_file, level)
    if enabled and settings is not None and file_level is not None:
        path = settings.logging_file_path
        os.makedirs(os.path.dirname(path) or ".", exist_ok=True)
        roll_log = RotatingFileHandler(
            path,
            maxBytes=settings.logging_max_bytes,
            backupCount=settings.logging_backup_count,
        )
        roll_log.setLevel(file_level)
        roll_log.setFormatter(formatter)
        handlers.append(roll_log)

    # replaces whatever the host configured before
    logging.basicConfig(level=level, handlers=handlers, force=True)

    structlog.configure(
        processors=[
            merge_contextvars,
            structlog.stdlib.add_log_level,
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )
