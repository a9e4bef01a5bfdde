"""Logging and Prometheus instrumentation."""

from __future__ import annotations

from scribe.observability.logging import configure_logging
from scribe.observability.metrics import (
    PIPELINE_REJECTIONS,
    SLUG_FALLBACKS,
    MetricsMiddleware,
    metrics_response,
)

__all__ = [
    "PIPELINE_REJECTIONS",
    "SLUG_FALLBACKS",
    "MetricsMiddleware",
    "configure_logging",
    "metrics_response",
]
