"""Utilities shared across the console gateway to standardise observability."""

from .logging import configure_logging, get_correlation_id, get_operation, operation_scope
from .metrics import ApiCallMetrics, setup_metrics

__all__ = [
    "ApiCallMetrics",
    "configure_logging",
    "get_correlation_id",
    "get_operation",
    "operation_scope",
    "setup_metrics",
]
