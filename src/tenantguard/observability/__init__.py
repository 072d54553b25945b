"""Observability module for tenantguard.

Provides structured logging with request and tenant correlation IDs.
"""

from tenantguard.observability.logging import (
    ConsoleFormatter,
    JsonFormatter,
    LogContext,
    configure_logging,
    correlation_id_var,
    get_log_context,
    get_logger,
    request_id_var,
    tenant_id_var,
)

__all__ = [
    "configure_logging",
    "get_logger",
    "get_log_context",
    "LogContext",
    "JsonFormatter",
    "ConsoleFormatter",
    "request_id_var",
    "correlation_id_var",
    "tenant_id_var",
]
