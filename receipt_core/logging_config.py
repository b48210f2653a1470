"""Конфигурация логирования распознавания чеков.

Использование:
    from receipt_core.logging_config import setup_logging, LogContext

    # В точке входа (services/receipt_ocr/server/main.py)
    setup_logging()

    # Контекст задачи: job_id попадёт во все записи внутри блока
    with LogContext(job_id="abc-123"):
        logger.info("Processing started", extra={"band_index": 2})

Переменные окружения:
    LOG_LEVEL - уровень логирования (DEBUG, INFO, WARNING, ERROR). По умолчанию: INFO
    LOG_FORMAT - формат логов (json, text). По умолчанию: json
"""

from __future__ import annotations

import json
import logging
import os
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Optional

# Контекст текущей задачи; у каждого потока/корутины свой
_log_context: ContextVar[Dict[str, Any]] = ContextVar("receipt_log_context", default={})

# Поля, которые выводятся из extra / контекста задачи
CONTEXT_FIELDS = (
    "job_id",
    "band_index",
    "y_offset",
    "band_height",
    "band_count",
    "chunked",
    "duration_ms",
    "status_code",
    "method",
    "path",
    "exception_type",
)

NOISY_LOGGERS = ("uvicorn", "uvicorn.access", "uvicorn.error", "httpx", "httpcore", "PIL")


class ContextFilter(logging.Filter):
    """Добавляет в запись поля из LogContext (extra имеет приоритет)."""

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in _log_context.get().items():
            if not hasattr(record, key):
                setattr(record, key, value)
        return True


class JSONFormatter(logging.Formatter):
    """JSON formatter для structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        payload: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }
        payload.update(
            {
                name: getattr(record, name)
                for name in CONTEXT_FIELDS
                if getattr(record, name, None) is not None
            }
        )
        if record.exc_info:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, ensure_ascii=False, default=str)


class TextFormatter(logging.Formatter):
    """Читаемый форматтер для локальной разработки; job_id добавляется, если есть."""

    def __init__(self) -> None:
        super().__init__(
            "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s",
            datefmt="%Y-%m-%d %H:%M:%S",
        )

    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        job_id = getattr(record, "job_id", None)
        return f"{line} [job={job_id}]" if job_id else line


_configured = False


def setup_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Настроить root logger один раз; повторные вызовы ничего не делают."""
    global _configured
    if _configured:
        return

    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    log_level = getattr(logging, level_name, logging.INFO)
    log_format = (fmt or os.getenv("LOG_FORMAT", "json")).lower()

    handler = logging.StreamHandler(sys.stdout)
    handler.setLevel(log_level)
    handler.addFilter(ContextFilter())
    handler.setFormatter(JSONFormatter() if log_format == "json" else TextFormatter())

    root = logging.getLogger()
    root.setLevel(log_level)
    root.handlers.clear()
    root.addHandler(handler)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    _configured = True


class LogContext:
    """Context manager: поля контекста добавляются ко всем записям внутри блока."""

    def __init__(self, **context: Any) -> None:
        self.context = context
        self._token: Optional[Token] = None

    def __enter__(self) -> "LogContext":
        self._token = _log_context.set({**_log_context.get(), **self.context})
        return self

    def __exit__(self, *args: Any) -> None:
        if self._token is not None:
            _log_context.reset(self._token)
            self._token = None
