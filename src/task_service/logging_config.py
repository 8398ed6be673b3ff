"""
Logging setup for the task service: a JSON formatter for production, request
id propagation, and one access log line per handled request.
"""
import json
import logging
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone
from typing import Optional

from fastapi import FastAPI, Request
from starlette.middleware.base import BaseHTTPMiddleware

from task_service.config import settings

logger = logging.getLogger("task_service")

REQUEST_ID_HEADER = "X-Request-ID"

# Health checks run constantly and are not access-logged
_UNLOGGED_PATHS = frozenset({"/health"})

_request_id: ContextVar[Optional[str]] = ContextVar("request_id", default=None)

# Attributes every LogRecord has; anything else arrived through `extra=`
_RESERVED_RECORD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__.keys()
) | {"message", "asctime"}


class RequestContext:
    """Request id of the request being handled by the current task."""

    @classmethod
    def get_request_id(cls) -> Optional[str]:
        return _request_id.get()

    @classmethod
    def set_request_id(cls, request_id: str) -> None:
        _request_id.set(request_id)

    @classmethod
    def clear_request_id(cls) -> None:
        _request_id.set(None)


class RequestIdMiddleware(BaseHTTPMiddleware):
    """Adopt the caller's X-Request-ID (or mint one) and echo it back."""

    async def dispatch(self, request: Request, call_next):
        request_id = request.headers.get(REQUEST_ID_HEADER) or str(uuid.uuid4())
        RequestContext.set_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            RequestContext.clear_request_id()
        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class JsonFormatter(logging.Formatter):
    """One JSON object per record, including any `extra=` fields."""

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            "environment": settings.ENVIRONMENT.value,
        }
        request_id = RequestContext.get_request_id()
        if request_id:
            entry["request_id"] = request_id
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        entry.update(
            (key, value)
            for key, value in record.__dict__.items()
            if key not in _RESERVED_RECORD_ATTRS and key not in entry
        )
        return json.dumps(entry, default=str)


def _build_formatter() -> logging.Formatter:
    if settings.is_production():
        return JsonFormatter()
    return logging.Formatter("%(asctime)s - %(levelname)s - %(name)s - %(message)s")


def setup_logging(app: FastAPI) -> None:
    """Route all logging to stdout and install the request id middleware."""
    level = logging.getLevelName(settings.LOGGING_LEVEL.upper())
    if not isinstance(level, int):
        level = logging.INFO

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_build_formatter())

    root_logger = logging.getLogger()
    root_logger.handlers.clear()
    root_logger.addHandler(handler)
    root_logger.setLevel(level)

    logger.setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)

    app.add_middleware(RequestIdMiddleware)

    logger.info(
        f"Logging configured at {logging.getLevelName(level)} "
        f"({'JSON' if settings.is_production() else 'plain text'})"
    )


class LoggingMiddleware(BaseHTTPMiddleware):
    """Access log: method, path, status and duration of each request."""

    async def dispatch(self, request: Request, call_next):
        if request.url.path in _UNLOGGED_PATHS:
            return await call_next(request)

        started = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(f"Request failed: {request.method} {request.url.path}: {e}", exc_info=True)
            raise

        logger.info(
            f"{request.method} {request.url.path} -> {response.status_code}",
            extra={
                "request": {
                    "method": request.method,
                    "path": request.url.path,
                    "client_host": request.client.host if request.client else None,
                },
                "response": {
                    "status_code": response.status_code,
                    "duration_ms": round((time.perf_counter() - started) * 1000, 2),
                },
            },
        )
        return response
