"""
Structured Logging Middleware

One access-log line per request carrying a request id, the timing, the
caller's user id and the item or file the route addressed.
"""

import json
import logging
import time
import uuid
from collections.abc import Callable
from contextvars import ContextVar
from datetime import datetime, timezone

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

request_id_var: ContextVar[str] = ContextVar("request_id", default="")

SKIPPED_PATHS = frozenset({"/health"})

# Route parameters copied into the access log
LOGGED_PATH_PARAMS = ("item_id", "file_id")


def _typed_param(value):
    # Path params arrive as strings; ids are logged as numbers
    if isinstance(value, str) and value.isdigit():
        return int(value)
    return value


class RequestIdFilter(logging.Filter):
    """Stamps every record with the id of the request being served."""

    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = request_id_var.get("")
        return True


class StructuredFormatter(logging.Formatter):
    """One JSON object per log line."""

    EXTRA_FIELDS = (
        "user_id",
        "item_id",
        "file_id",
        "method",
        "path",
        "status_code",
        "duration_ms",
        "client_ip",
    )

    def format(self, record: logging.LogRecord) -> str:
        entry = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "request_id": getattr(record, "request_id", ""),
        }
        entry.update({key: getattr(record, key) for key in self.EXTRA_FIELDS if hasattr(record, key)})
        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def client_ip(request: Request) -> str:
    forwarded = request.headers.get("X-Forwarded-For")
    if forwarded:
        return forwarded.split(",")[0].strip()
    return request.client.host if request.client else "unknown"


def level_for_status(status_code: int) -> int:
    if status_code >= 500:
        return logging.ERROR
    if status_code >= 400:
        return logging.WARNING
    return logging.INFO


class StructuredLoggingMiddleware(BaseHTTPMiddleware):
    def __init__(self, app: ASGIApp, logger_name: str = "drive.access"):
        super().__init__(app)
        self.logger = logging.getLogger(logger_name)

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        request_id = request.headers.get("X-Request-ID") or str(uuid.uuid4())
        request_id_var.set(request_id)
        # Filled in by the auth dependency; shared with the endpoint through scope["state"]
        request.state.user_id = None
        started = time.perf_counter()

        try:
            response = await call_next(request)
        except Exception as exc:
            self.log_access(request, 500, started, error=str(exc))
            raise

        response.headers["X-Request-ID"] = request_id
        self.log_access(request, response.status_code, started)
        return response

    def log_access(self, request: Request, status_code: int, started: float, error: str | None = None) -> None:
        path = request.url.path
        if path in SKIPPED_PATHS:
            return

        duration_ms = round((time.perf_counter() - started) * 1000, 2)
        extra = {
            "method": request.method,
            "path": path,
            "status_code": status_code,
            "duration_ms": duration_ms,
            "client_ip": client_ip(request),
        }
        if request.state.user_id is not None:
            extra["user_id"] = request.state.user_id
        for name in LOGGED_PATH_PARAMS:
            if name in request.path_params:
                extra[name] = _typed_param(request.path_params[name])

        message = "%s %s - %s (%.2fms)"
        args = [request.method, path, status_code, duration_ms]
        if error:
            message += " - Error: %s"
            args.append(error)
        self.logger.log(level_for_status(status_code), message, *args, extra=extra)


def setup_structured_logging(log_level: str = "INFO", json_format: bool = True) -> None:
    """
    Configure the root logger once at startup.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR)
        json_format: Emit JSON lines instead of plain text
    """
    level = getattr(logging, log_level.upper())
    handler = logging.StreamHandler()
    handler.addFilter(RequestIdFilter())
    if json_format:
        handler.setFormatter(StructuredFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"))

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level)

    logging.getLogger("drive.access").setLevel(level)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)
    logging.getLogger("sqlalchemy.engine").setLevel(logging.WARNING)


def get_request_id() -> str:
    return request_id_var.get("")
