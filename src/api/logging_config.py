"""Logging configuration for the FastAPI application.

This module provides structured logging setup with JSON formatting so worker
and request logs can be parsed by log aggregation systems.
"""

import json
import logging
import os
import sys
import time
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from fastapi import Request, Response
from starlette.middleware.base import BaseHTTPMiddleware

# Environment variable overriding the log level
LOG_LEVEL_ENV = "CATALOGREC_LOG_LEVEL"
DEFAULT_LOG_LEVEL = "INFO"

# Attributes every LogRecord has; anything else came in through ``extra``
_STANDARD_ATTRS = set(
    logging.LogRecord("", logging.INFO, "", 0, "", None, None).__dict__
) | {"message", "asctime", "taskName"}


class JSONFormatter(logging.Formatter):
    """Custom JSON formatter for structured logging.

    Formats log records as JSON, merging any ``extra`` fields into the
    top-level object.
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON.

        Args:
            record: Log record to format.

        Returns:
            JSON string representation of the log record.
        """
        log_data: Dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        if record.exc_info:
            log_data["exception"] = self.formatException(record.exc_info)

        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS:
                log_data[key] = value

        # Extras may hold arbitrary objects (users, products)
        return json.dumps(log_data, default=str)


def setup_logging(log_level: Optional[str] = None) -> None:
    """Configure application-wide logging with JSON formatting.

    Args:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL).
            Defaults to the ``CATALOGREC_LOG_LEVEL`` environment variable,
            then INFO.
    """
    level_name = (log_level or os.getenv(LOG_LEVEL_ENV, DEFAULT_LOG_LEVEL)).upper()
    level = getattr(logging, level_name, logging.INFO)

    logger = logging.getLogger()
    logger.setLevel(level)
    logger.handlers.clear()

    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setLevel(level)
    console_handler.setFormatter(JSONFormatter())
    logger.addHandler(console_handler)

    # Set levels for third-party loggers
    logging.getLogger("uvicorn").setLevel(logging.WARNING)
    logging.getLogger("uvicorn.access").setLevel(logging.WARNING)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """Middleware to log incoming HTTP requests and responses.

    Logs request method, path, status code, and response time in structured
    format, and tags every response with an ``X-Request-ID`` header.
    """

    async def dispatch(self, request: Request, call_next: Any) -> Response:
        request_id = str(uuid.uuid4())
        start_time = time.time()
        logger = logging.getLogger("src.api.main")

        logger.info(
            "Incoming request",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": str(request.url.path),
                "client_host": request.client.host if request.client else None,
            },
        )

        try:
            response = await call_next(request)
        except Exception as e:
            logger.error(
                "Request failed",
                extra={
                    "request_id": request_id,
                    "method": request.method,
                    "path": str(request.url.path),
                    "error": str(e),
                    "error_type": type(e).__name__,
                    "duration_ms": round((time.time() - start_time) * 1000, 2),
                },
                exc_info=True,
            )
            # Re-raise exception to be handled by FastAPI error handlers
            raise

        logger.info(
            "Request completed",
            extra={
                "request_id": request_id,
                "method": request.method,
                "path": str(request.url.path),
                "status_code": response.status_code,
                "duration_ms": round((time.time() - start_time) * 1000, 2),
            },
        )
        response.headers["X-Request-ID"] = request_id
        return response
