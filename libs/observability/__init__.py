"""Logging and metrics helpers shared across services."""

from .logging import RequestContextMiddleware, configure_logging, get_correlation_id, get_request_id
from .metrics import service_counter, setup_metrics

__all__ = [
    "RequestContextMiddleware",
    "configure_logging",
    "get_correlation_id",
    "get_request_id",
    "service_counter",
    "setup_metrics",
]
