"""Minimal observability for logging, health checks and metrics.

Provides JSON logging, health/readiness endpoints, and in-process metrics
without external dependencies.
"""
import uuid
from typing import Optional

from . import logging as logging_module
from . import health
from . import metrics


def generate_trace_id() -> str:
    """Generate a new trace ID for request/CLI contexts."""
    return str(uuid.uuid4())


def set_trace_id(trace_id: Optional[str] = None) -> str:
    """Set or generate trace ID for current context."""
    if not trace_id:
        trace_id = generate_trace_id()
    logging_module.set_trace_id(trace_id)
    return trace_id


def init_observability() -> None:
    """Initialize JSON logging; metrics are gated by ``settings.enable_metrics``."""
    logging_module.init_logging()


__all__ = [
    "logging_module",
    "health",
    "metrics",
    "generate_trace_id",
    "set_trace_id",
    "init_observability",
]
