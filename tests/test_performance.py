"""Tests for warble.performance — render timing and metric delivery."""

import logging

import pytest

from warble.config import PerformanceOptions
from warble.performance import (
    PerformanceMetrics,
    PerformanceMonitor,
    create_performance_monitor,
    record_performance_metrics,
)


class TestPerformanceMonitor:
    def test_measures_duration(self) -> None:
        monitor = PerformanceMonitor()
        monitor.start("html", "ssr")
        metrics = monitor.end()
        assert metrics.engine == "html"
        assert metrics.phase == "ssr"
        assert metrics.end_time >= metrics.start_time
        assert metrics.duration == pytest.approx(metrics.end_time - metrics.start_time)

    def test_custom_metrics(self) -> None:
        monitor = PerformanceMonitor()
        monitor.start("html")
        monitor.add_metric("layouts", 2)
        assert monitor.end().extra == {"layouts": 2}

    def test_end_resets_extra(self) -> None:
        monitor = PerformanceMonitor()
        monitor.start("html")
        monitor.add_metric("x", 1)
        monitor.end()
        assert monitor.end().extra == {}


class TestCreateMonitor:
    def test_disabled(self) -> None:
        assert create_performance_monitor(None) is None
        assert create_performance_monitor(PerformanceOptions()) is None

    def test_enabled(self) -> None:
        assert isinstance(create_performance_monitor(PerformanceOptions(enabled=True)), PerformanceMonitor)


class TestRecordMetrics:
    def _metrics(self) -> PerformanceMetrics:
        return PerformanceMetrics("html", "ssr", 0.0, 1.5, 1.5)

    def test_callback_receives_metrics(self) -> None:
        received: list[PerformanceMetrics] = []
        metrics = self._metrics()
        record_performance_metrics(metrics, PerformanceOptions(enabled=True, on_metrics=received.append))
        assert received == [metrics]

    def test_callback_failure_logged(self, caplog: pytest.LogCaptureFixture) -> None:
        def broken(metrics: PerformanceMetrics) -> None:
            raise RuntimeError("sink down")

        with caplog.at_level(logging.ERROR, logger="warble.performance"):
            record_performance_metrics(self._metrics(), PerformanceOptions(enabled=True, on_metrics=broken))
        assert "Performance metrics callback failed" in caplog.text

    def test_no_callback(self) -> None:
        record_performance_metrics(self._metrics(), None)
