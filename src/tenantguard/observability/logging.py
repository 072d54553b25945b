"""Structured logging with request and tenant correlation.

Provides:
- JSON-formatted logs for log aggregation systems (ELK, Loki, etc.)
- Human-readable console logs for development
- Correlation context (request, correlation and tenant IDs) via ContextVar

Usage:
    from tenantguard.observability.logging import configure_logging

    # In host application startup
    configure_logging()  # LOG_JSON / LOG_LEVEL from settings

    # Correlation context is automatically included in logs
    logger = logging.getLogger(__name__)
    logger.info("Processing request")  # Includes request_id, tenant_id, etc.
"""

from __future__ import annotations

import contextvars
import json
import logging
import sys
from datetime import datetime, timezone
from typing import Any

from tenantguard.config import settings

# Context variables for request correlation
request_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("request_id", default="")
correlation_id_var: contextvars.ContextVar[str] = contextvars.ContextVar(
    "correlation_id", default=""
)
tenant_id_var: contextvars.ContextVar[str] = contextvars.ContextVar("tenant_id", default="")

_CONTEXT_VARS: dict[str, contextvars.ContextVar[str]] = {
    "request_id": request_id_var,
    "correlation_id": correlation_id_var,
    "tenant_id": tenant_id_var,
}

# Standard LogRecord attributes, never copied as extra fields
_STANDARD_ATTRS = frozenset(
    {
        "name",
        "msg",
        "args",
        "created",
        "filename",
        "funcName",
        "levelname",
        "levelno",
        "lineno",
        "module",
        "msecs",
        "pathname",
        "process",
        "processName",
        "relativeCreated",
        "stack_info",
        "exc_info",
        "exc_text",
        "thread",
        "threadName",
        "taskName",
        "message",
    }
)


def get_log_context() -> dict[str, str]:
    """Return the correlation values bound in the current context."""
    return {name: var.get() for name, var in _CONTEXT_VARS.items() if var.get()}


class JsonFormatter(logging.Formatter):
    """JSON log formatter with correlation context.

    Output format:
    {
        "timestamp": "2026-01-10T12:34:56.789Z",
        "level": "DEBUG",
        "logger": "tenantguard.pipeline.interceptors",
        "message": "Tenant cache hit",
        "module": "interceptors",
        "function": "__call__",
        "line": 42,
        "request_id": "abc-123",
        "tenant_id": "tenant-1"
    }
    """

    def format(self, record: logging.LogRecord) -> str:
        """Format log record as JSON."""
        log_data: dict[str, Any] = {
            "timestamp": datetime.now(timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "module": record.module,
            "function": record.funcName,
            "line": record.lineno,
        }

        log_data.update(get_log_context())

        if record.exc_info:
            log_data["exception"] = {
                "type": record.exc_info[0].__name__ if record.exc_info[0] else None,
                "message": str(record.exc_info[1]) if record.exc_info[1] else None,
                "traceback": self.formatException(record.exc_info),
            }

        # Extra fields passed through logger.debug(..., extra={...})
        for key, value in record.__dict__.items():
            if key not in _STANDARD_ATTRS and not key.startswith("_"):
                try:
                    json.dumps(value)
                    log_data[key] = value
                except (TypeError, ValueError):
                    log_data[key] = str(value)

        return json.dumps(log_data, default=str, ensure_ascii=False)


class ConsoleFormatter(logging.Formatter):
    """Human-readable formatter for development.

    Output format:
    2026-01-10 12:34:56 | DEBUG    | tenantguard.pipeline | Tenant cache hit | tenant=tenant-1
    """

    COLORS = {
        "DEBUG": "\033[36m",  # Cyan
        "INFO": "\033[32m",  # Green
        "WARNING": "\033[33m",  # Yellow
        "ERROR": "\033[31m",  # Red
        "CRITICAL": "\033[35m",  # Magenta
    }
    RESET = "\033[0m"

    def __init__(self, use_colors: bool = True) -> None:
        super().__init__()
        self.use_colors = use_colors and sys.stderr.isatty()

    def format(self, record: logging.LogRecord) -> str:
        """Format log record for console output."""
        timestamp = datetime.now().strftime("%Y-%m-%d %H:%M:%S")
        level = record.levelname

        if self.use_colors:
            color = self.COLORS.get(level, "")
            level = f"{color}{level}{self.RESET}"

        message = record.getMessage()

        context_parts = []
        request_id = request_id_var.get()
        if request_id:
            context_parts.append(f"req={request_id[:8]}")
        tenant_id = tenant_id_var.get()
        if tenant_id:
            context_parts.append(f"tenant={tenant_id}")

        context = f" | {' '.join(context_parts)}" if context_parts else ""

        result = f"{timestamp} | {level:8} | {record.name} | {message}{context}"

        if record.exc_info:
            result += "\n" + self.formatException(record.exc_info)

        return result


def configure_logging(
    json_format: bool | None = None,
    level: str | None = None,
    use_colors: bool = True,
) -> None:
    """Configure application-wide logging.

    Args:
        json_format: Use JSON format (recommended for production);
            defaults to settings.log_json
        level: Log level (DEBUG, INFO, WARNING, ERROR, CRITICAL);
            defaults to settings.log_level
        use_colors: Use ANSI colors in console format
    """
    if json_format is None:
        json_format = settings.log_json
    if level is None:
        level = settings.log_level

    root_logger = logging.getLogger()
    root_logger.setLevel(getattr(logging, level.upper()))

    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)

    handler = logging.StreamHandler(sys.stderr)

    if json_format:
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(ConsoleFormatter(use_colors=use_colors))

    root_logger.addHandler(handler)

    # Reduce noise from the Redis client
    logging.getLogger("redis").setLevel(logging.WARNING)


class LogContext:
    """Context manager for adding temporary log context.

    Usage:
        with LogContext(request_id="abc-123", tenant_id="acme"):
            logger.info("Processing request")  # Includes request_id and tenant_id
    """

    def __init__(self, **kwargs: Any) -> None:
        unknown = set(kwargs) - set(_CONTEXT_VARS)
        if unknown:
            raise ValueError(f"Unknown log context keys: {sorted(unknown)}")
        self.extra = kwargs
        self._tokens: dict[str, contextvars.Token[str]] = {}

    def __enter__(self) -> LogContext:
        for key, value in self.extra.items():
            self._tokens[key] = _CONTEXT_VARS[key].set(str(value))
        return self

    def __exit__(self, *args: Any) -> None:
        for key, token in self._tokens.items():
            _CONTEXT_VARS[key].reset(token)
        self._tokens.clear()


def get_logger(name: str) -> logging.Logger:
    """Get a logger with the given name.

    Args:
        name: Logger name (typically __name__)

    Returns:
        Logger instance
    """
    return logging.getLogger(name)
