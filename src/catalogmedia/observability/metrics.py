"""Metrics hook protocol and no-op default implementation.

The pipeline emits counters, timings and gauges for validation, image
normalization and uploads.  A :class:`NoopMetricsHook` is used unless the
caller sets ``UploaderConfig.metrics`` to an object satisfying
:class:`MetricsHook` (StatsD, Prometheus, Datadog adapters...).

Emitted metric names:

* ``catalogmedia.files_rejected_total``    -- counter
* ``catalogmedia.upload_attempts_total``   -- counter
* ``catalogmedia.retries_total``           -- counter
* ``catalogmedia.upload_success_total``    -- counter
* ``catalogmedia.upload_failure_total``    -- counter
* ``catalogmedia.upload_duration_ms``      -- timing
* ``catalogmedia.normalize_duration_ms``   -- timing
* ``catalogmedia.bytes_saved``             -- gauge
"""

from __future__ import annotations

from typing import Protocol, runtime_checkable

METRIC_NAMES: tuple[str, ...] = (
    "catalogmedia.files_rejected_total",
    "catalogmedia.upload_attempts_total",
    "catalogmedia.retries_total",
    "catalogmedia.upload_success_total",
    "catalogmedia.upload_failure_total",
    "catalogmedia.upload_duration_ms",
    "catalogmedia.normalize_duration_ms",
    "catalogmedia.bytes_saved",
)


@runtime_checkable
class MetricsHook(Protocol):
    """Protocol that any metrics backend must satisfy.

    All methods accept an optional *tags* dict of string keys and values.
    """

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Increment a counter metric."""
        ...

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Record a duration in milliseconds."""
        ...

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        """Set a gauge metric to an absolute value."""
        ...


class NoopMetricsHook:
    """Default metrics implementation that discards all data points."""

    __slots__ = ()

    def increment(
        self,
        name: str,
        value: int = 1,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def timing(
        self,
        name: str,
        ms: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass

    def gauge(
        self,
        name: str,
        value: float,
        tags: dict[str, str] | None = None,
    ) -> None:
        pass
