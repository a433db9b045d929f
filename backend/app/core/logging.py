"""
Structured logging configuration.

Features:
- JSON logging format for production
- Request ID tracking
- Acting user tracking (X-User-ID header)
- Route tagging for /routes/{id} and /reports/routes/{id} requests
- Performance timing
"""

import json
import logging
import re
import sys
import time
import uuid
from contextvars import ContextVar
from datetime import datetime, timezone

from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response

from app.core.config import settings

# Context variables for request tracking
request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str] = ContextVar("user_id", default="")
route_id_var: ContextVar[str] = ContextVar("route_id", default="")

_ROUTE_PATH = re.compile(r"/routes/([0-9a-fA-F-]{36})(?:/|$)")

# Attributes every LogRecord carries; anything else came in through `extra=`.
_RESERVED_RECORD_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", (), None).__dict__
) | {"message", "asctime"}


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def current_context() -> dict:
    """Tracking ids bound to the current request, empty ones omitted."""
    context = {
        "request_id": request_id_var.get(),
        "user_id": user_id_var.get(),
        "route_id": route_id_var.get(),
    }
    return {key: value for key, value in context.items() if value}


class JSONFormatter(logging.Formatter):
    """JSON log formatter for structured logging."""

    def format(self, record: logging.LogRecord) -> str:
        log_data = {
            "timestamp": _utc_now().isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
            **current_context(),
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _RESERVED_RECORD_ATTRS and not key.startswith("_"):
                log_data[key] = value

        return json.dumps(log_data, default=str)


class HumanFormatter(logging.Formatter):
    """Human-readable log formatter for development."""

    _TAGS = {"request_id": "", "user_id": "user:", "route_id": "route:"}

    def format(self, record: logging.LogRecord) -> str:
        context = "".join(
            f"[{self._TAGS[key]}{value[:8]}]" for key, value in current_context().items()
        )

        timestamp = _utc_now().strftime("%Y-%m-%d %H:%M:%S")
        line = (
            f"{timestamp} {record.levelname:8} {context:20} "
            f"{record.name}:{record.funcName}:{record.lineno} - {record.getMessage()}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


def setup_logging(
    level: str = "INFO",
    json_format: bool = False,
) -> None:
    """
    Configure application logging.

    Args:
        level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Use JSON format (for production)
    """
    root_logger = logging.getLogger()
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stdout)

    if json_format or not settings.DEBUG:
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(HumanFormatter())

    root_logger.addHandler(handler)
    root_logger.setLevel(getattr(logging, level.upper()))

    loggers_config = {
        "app": level,
        "uvicorn": "INFO",
        "uvicorn.access": "INFO",
        "sqlalchemy.engine": "WARNING" if not settings.DEBUG else "INFO",
        "aiosqlite": "WARNING",
        "httpx": "WARNING",
    }

    for logger_name, logger_level in loggers_config.items():
        logging.getLogger(logger_name).setLevel(getattr(logging, logger_level.upper()))


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """
    Middleware for request logging and tracking.

    Assigns a request ID, logs request/response with timing and echoes the
    ID back in the X-Request-ID header.
    """

    async def dispatch(self, request: Request, call_next) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_var.set(request_id)
        request.state.request_id = request_id

        user_id_var.set(request.headers.get("X-User-ID", ""))

        match = _ROUTE_PATH.search(request.url.path)
        route_id_var.set(match.group(1) if match else "")

        logger = logging.getLogger("app.requests")

        logger.info(
            f"Request started: {request.method} {request.url.path}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "query": str(request.query_params),
                "client_ip": request.client.host if request.client else None,
            },
        )

        start_time = time.perf_counter()
        try:
            response = await call_next(request)
        except Exception as e:
            logger.exception(
                f"Request failed: {request.method} {request.url.path}",
                extra={"error": str(e)},
            )
            raise

        duration_ms = (time.perf_counter() - start_time) * 1000

        logger.info(
            f"Request completed: {request.method} {request.url.path} - {response.status_code}",
            extra={
                "method": request.method,
                "path": request.url.path,
                "status_code": response.status_code,
                "duration_ms": round(duration_ms, 2),
            },
        )

        response.headers["X-Request-ID"] = request_id

        return response
