"""structlog setup for the bot.

Every event goes through the standard library root logger, so the
stdout handler and the rotating log file see the same lines. Events are
tagged with the emitting module and the bot's nickname.
"""

import logging
import os
import sys
from logging.handlers import RotatingFileHandler
from typing import TYPE_CHECKING, Optional

import structlog

if TYPE_CHECKING:
    from ..config import BotConfig


def _renderer(debug: bool):
    if debug:
        return structlog.dev.ConsoleRenderer(colors=False)
    return structlog.processors.JSONRenderer()


def _handlers(config: "BotConfig") -> tuple[list[logging.Handler], Optional[OSError]]:
    handlers: list[logging.Handler] = [logging.StreamHandler(sys.stdout)]
    try:
        os.makedirs(config.log_dir, exist_ok=True)
        handlers.append(RotatingFileHandler(
            os.path.join(config.log_dir, config.log_file),
            maxBytes=config.log_max_bytes,
            backupCount=config.log_backup_count,
            encoding="utf-8",
        ))
    except OSError as e:
        return handlers, e
    return handlers, None


def setup_logging(config: "BotConfig") -> None:
    level = logging.DEBUG if config.debug else logging.INFO

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    handlers, file_error = _handlers(config)
    for handler in handlers:
        handler.setLevel(level)
        handler.setFormatter(logging.Formatter("%(message)s"))
        root.addHandler(handler)

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.stdlib.add_logger_name,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            _renderer(config.debug),
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(bot=config.nickname)
    if file_error is not None:
        get_logger("utils.logging").warning("log_file_disabled", error=str(file_error))


def get_logger(name: str) -> structlog.BoundLogger:
    """Get a named structured logger."""
    return structlog.get_logger(name)
