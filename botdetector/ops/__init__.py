"""Operational helpers."""

from botdetector.ops.logging import configure_logging
from botdetector.ops.metrics import InMemoryMetricsRecorder, MetricsRecorder, TimingStats, get_metrics_recorder

__all__ = ["configure_logging", "InMemoryMetricsRecorder", "MetricsRecorder", "TimingStats", "get_metrics_recorder"]
