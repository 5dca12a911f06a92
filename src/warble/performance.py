"""Render timing.

``render_ssr`` starts a monitor when ``PerformanceOptions.enabled`` is
set, attaches the finished metrics to the result, and hands them to
``on_metrics``.  Durations are milliseconds on ``time.perf_counter``.
"""

from __future__ import annotations

import logging
import time
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    from warble.config import PerformanceOptions

logger = logging.getLogger("warble.performance")


@dataclass(frozen=True, slots=True)
class PerformanceMetrics:
    """Timing for one render.  Times are ``perf_counter`` milliseconds."""

    engine: str
    phase: str
    start_time: float
    end_time: float
    duration: float
    extra: dict[str, Any] = field(default_factory=dict)


class PerformanceMonitor:
    """Measures a single phase.  ``end()`` resets the monitor for reuse."""

    __slots__ = ("_engine", "_extra", "_phase", "_start")

    def __init__(self) -> None:
        self._engine = ""
        self._phase = ""
        self._start = 0.0
        self._extra: dict[str, Any] = {}

    def start(self, engine: str, phase: str = "ssr") -> None:
        self._engine = engine
        self._phase = phase
        self._extra = {}
        self._start = time.perf_counter() * 1000

    def add_metric(self, key: str, value: Any) -> None:
        """Attach a custom value to the metrics being collected."""
        self._extra[key] = value

    def end(self) -> PerformanceMetrics:
        end = time.perf_counter() * 1000
        metrics = PerformanceMetrics(
            engine=self._engine,
            phase=self._phase,
            start_time=self._start,
            end_time=end,
            duration=end - self._start,
            extra=self._extra,
        )
        self._extra = {}
        return metrics


def create_performance_monitor(options: PerformanceOptions | None) -> PerformanceMonitor | None:
    """A fresh monitor, or ``None`` when monitoring is disabled."""
    if options is None or not options.enabled:
        return None
    return PerformanceMonitor()


def record_performance_metrics(
    metrics: PerformanceMetrics,
    options: PerformanceOptions | None,
) -> None:
    """Deliver *metrics* to ``on_metrics``; callback failures are logged."""
    if options is None or options.on_metrics is None:
        return
    try:
        options.on_metrics(metrics)
    except Exception:
        logger.exception("Performance metrics callback failed")
