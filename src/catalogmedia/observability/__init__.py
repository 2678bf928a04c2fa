"""Observability: structured logging and metrics hooks for catalogmedia."""

from __future__ import annotations

from .logger import StructuredFormatter, get_logger
from .metrics import METRIC_NAMES, MetricsHook, NoopMetricsHook

__all__ = [
    "METRIC_NAMES",
    "MetricsHook",
    "NoopMetricsHook",
    "StructuredFormatter",
    "get_logger",
]
