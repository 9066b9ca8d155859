"""Application logging with Loguru + Slack notifications.

Every line carries the emitting component (``name``) and the ingestion
run it belongs to (``run_id``, ``-`` outside a run). Components get their
logger from ``get_logger``; a run binds its id with ``logger.bind``.
"""

import logging
import sys
from pathlib import Path
from typing import Any

import httpx
from loguru import logger

from app.core.config import settings

LOG_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level} | {extra[name]}:{function}:{line} | "
    "run_id={extra[run_id]} | {message}"
)

# Defaults for the fields LOG_FORMAT reads from ``extra``
DEFAULT_EXTRA = {"name": "app", "run_id": "-"}

LOG_DIR = Path("logs")

_LEVEL_ALIASES = {"WARN": "WARNING", "FATAL": "CRITICAL"}
_LEVELS = {"TRACE", "DEBUG", "INFO", "SUCCESS", "WARNING", "ERROR", "CRITICAL"}

# Stdlib loggers routed through Loguru instead of their own handlers
_INTERCEPTED = ("uvicorn", "uvicorn.error", "uvicorn.access", "alembic", "httpx")

_logging_configured = False


class InterceptHandler(logging.Handler):
    """Redirect stdlib logs to Loguru."""

    def emit(self, record: logging.LogRecord) -> None:
        try:
            level = logger.level(record.levelname).name
        except ValueError:
            level = record.levelno

        frame, depth = logging.currentframe(), 2
        while frame and frame.f_code.co_name == "emit":
            frame = frame.f_back
            depth += 1

        logger.opt(depth=depth, exception=record.exc_info).bind(name=record.name).log(level, record.getMessage())


def _slack_sink(message: Any) -> None:
    if not settings.SLACK_WEBHOOK_URL:
        return

    record = message.record
    extra = record["extra"]
    text = (
        f"[{record['level'].name}] {extra.get('name', 'app')}:{record['function']}:{record['line']} "
        f"(run {extra.get('run_id', '-')})\n{record['message']}"
    )
    try:
        httpx.post(settings.SLACK_WEBHOOK_URL, json={"text": text}, timeout=5.0)
    except httpx.HTTPError:
        # Logging here would recurse into this sink
        pass


def resolve_level(raw: Any) -> str:
    """Normalize a configured level name; unknown values fall back to INFO."""
    level = str(raw or "INFO").strip().upper()
    level = _LEVEL_ALIASES.get(level, level)
    return level if level in _LEVELS else "INFO"


def configure_logging() -> None:
    global _logging_configured

    if _logging_configured:
        return
    _logging_configured = True

    level = resolve_level(settings.effective_log_level)
    LOG_DIR.mkdir(exist_ok=True)

    logger.remove()
    logger.configure(extra=DEFAULT_EXTRA)
    logger.add(sys.stdout, level=level, format=LOG_FORMAT, backtrace=False, diagnose=False)
    logger.add(
        LOG_DIR / "app.log",
        level=level,
        format=LOG_FORMAT,
        rotation="10 MB",
        retention="14 days",
        enqueue=True,
        backtrace=False,
        diagnose=False,
    )

    if settings.SLACK_WEBHOOK_URL:
        logger.add(_slack_sink, level="ERROR", enqueue=True)

    logging.basicConfig(handlers=[InterceptHandler()], level=0, force=True)
    for logger_name in _INTERCEPTED:
        logging.getLogger(logger_name).handlers = [InterceptHandler()]
        logging.getLogger(logger_name).propagate = False


def get_logger(name: str) -> logger.__class__:
    return logger.bind(name=name)


configure_logging()
