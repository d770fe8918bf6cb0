"""Loguru setup; stdlib loggers (uvicorn, SQLAlchemy, APScheduler) are routed through it."""

import logging
import sys
from typing import Any

from loguru import logger

from shopfloor.config import get_settings

# Access-log lines for these paths only show at DEBUG
QUIET_PATHS = ("/health",)

INTERCEPTED_LOGGERS = (
    "uvicorn",
    "uvicorn.error",
    "uvicorn.access",
    "sqlalchemy.engine",
    "apscheduler",
)

_TEXT_FORMAT = "{time:YYYY-MM-DD HH:mm:ss} | {level: <8} | {extra[name]}:{function}:{line} | {message} | {extra}"
_DEBUG_FORMAT = (
    "<green>{time:YYYY-MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{extra[name]}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "<level>{message}</level> | {extra}"
)


class InterceptHandler(logging.Handler):
    """Forward stdlib log records to loguru, keeping the original caller."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level: str | int = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_filename == logging.__file__:
            frame = frame.f_back  # type: ignore[assignment]
            depth += 1

        logger.bind(name=record.name).opt(depth=depth, exception=record.exc_info).log(level, record.getMessage())


def quiet_paths_filter(record: dict[str, Any]) -> bool:
    """Hide health-check access lines below DEBUG so polling doesn't flood the log."""
    message = record.get("message", "")
    if any(path in message for path in QUIET_PATHS):
        return bool(record["level"].no <= logger.level("DEBUG").no)
    return True


def setup_logging() -> None:
    """Configure the single stderr sink from settings."""
    settings = get_settings()
    level = "DEBUG" if settings.debug else settings.log_level.upper()

    logger.remove()
    logger.configure(extra={"name": "shopfloor"})
    logger.add(
        sys.stderr,
        level=level,
        format=_DEBUG_FORMAT if settings.debug else _TEXT_FORMAT,
        filter=None if settings.debug else quiet_paths_filter,
        serialize=settings.log_json and not settings.debug,
        backtrace=settings.debug,
        diagnose=settings.debug,
    )

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for name in INTERCEPTED_LOGGERS:
        logging.getLogger(name).handlers = [InterceptHandler()]


def get_logger(name: str) -> Any:
    """Get a logger bound to a module name."""
    return logger.bind(name=name)
