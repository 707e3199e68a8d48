"""
Logging setup.

Modules log through ``logging.getLogger(__name__)`` and pass structured context
with ``extra={...}``. The formatters below append that context to each line:
as ``key=value`` text in development and as a single JSON object in production.
"""
import json
import logging
import time
from typing import Optional

from fastapi import Request

from league.core.config import settings

# Attributes every LogRecord carries; anything else came in through ``extra``.
_RESERVED_ATTRS = set(vars(logging.makeLogRecord({}))) | {"message", "asctime"}

request_logger = logging.getLogger("league.http")


def _context(record: logging.LogRecord) -> dict:
    return {key: value for key, value in vars(record).items() if key not in _RESERVED_ATTRS}


class ContextFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        line = super().format(record)
        context = _context(record)
        if context:
            line += " " + json.dumps(context, default=str, ensure_ascii=False)
        return line


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": self.formatTime(record, "%Y-%m-%dT%H:%M:%S"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context(record))
        if record.exc_info:
            entry["stack"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str, ensure_ascii=False)


def setup_logging(level: Optional[str] = None) -> None:
    handler = logging.StreamHandler()
    if settings.is_development:
        handler.setFormatter(ContextFormatter("%(asctime)s [%(levelname)s] %(name)s: %(message)s", "%Y-%m-%d %H:%M:%S"))
    else:
        handler.setFormatter(JsonFormatter())

    root = logging.getLogger()
    root.handlers = [handler]
    root.setLevel((level or settings.LOG_LEVEL).upper())


async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    duration_ms = round((time.perf_counter() - start) * 1000, 1)
    context = {
        "method": request.method,
        "path": request.url.path,
        "status": response.status_code,
        "duration_ms": duration_ms,
        "client": request.client.host if request.client else None,
    }
    if response.status_code >= 400:
        request_logger.warning("HTTP request", extra=context)
    else:
        request_logger.info("HTTP request", extra=context)
    return response
