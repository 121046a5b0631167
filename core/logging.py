"""
Structured logging configuration.

Provides JSON-formatted logs for parsing and aggregation by whatever service
embeds the engine. Every record emitted while a program is being generated
carries that run's generation id, so the evidence, goal and week logs of one
plan can be pulled out of an interleaved stream.

Usage:
    setup_logging()
    with generation_context(new_generation_id()):
        logger.info("...", extra={"extra_fields": {"methodology": "CANOVA"}})
"""
import logging
import sys
import json
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Any, Dict, Iterator, Optional
from core.config import settings

_generation_id: ContextVar[Optional[str]] = ContextVar("generation_id", default=None)


def new_generation_id() -> str:
    return uuid.uuid4().hex[:12]


def current_generation_id() -> Optional[str]:
    return _generation_id.get()


@contextmanager
def generation_context(generation_id: str) -> Iterator[str]:
    """Tag every log record inside the block with a generation id."""
    token = _generation_id.set(generation_id)
    try:
        yield generation_id
    finally:
        _generation_id.reset(token)


class GenerationIdFilter(logging.Filter):
    """Copies the active generation id onto the record ("-" outside a run)."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.generation_id = current_generation_id() or "-"
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        generation_id = current_generation_id()
        if generation_id:
            log_data["generation_id"] = generation_id

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        if hasattr(record, "extra_fields"):
            log_data.update(record.extra_fields)

        return json.dumps(log_data, default=str)


def setup_logging():
    """
    Configure application-wide logging.

    Uses JSON format in production, text format in development. The text
    format shows the generation id in brackets.
    """
    log_level = getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO)

    if settings.LOG_FORMAT == "json" or settings.ENVIRONMENT == "production":
        formatter = JSONFormatter()
    else:
        formatter = logging.Formatter(
            "%(asctime)s - %(name)s - %(levelname)s - [%(generation_id)s] %(message)s"
        )

    root_logger = logging.getLogger()
    root_logger.setLevel(log_level)

    root_logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(log_level)
    console_handler.addFilter(GenerationIdFilter())
    console_handler.setFormatter(formatter)
    root_logger.addHandler(console_handler)

    return root_logger
