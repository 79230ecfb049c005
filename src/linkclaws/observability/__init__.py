"""Structured logging and correlation ids."""

from .correlation import (
    correlation_id_var,
    generate_correlation_id,
    get_correlation_id,
    set_correlation_id,
)
from .logging_config import configure_logging, CorrelationIDFilter, JSONFormatter
from .middleware import RequestIDMiddleware

__all__ = [
    "correlation_id_var",
    "generate_correlation_id",
    "get_correlation_id",
    "set_correlation_id",
    "configure_logging",
    "CorrelationIDFilter",
    "JSONFormatter",
    "RequestIDMiddleware",
]
