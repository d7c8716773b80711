"""Unit tests for call metrics."""

from botdetector.ops.metrics import InMemoryMetricsRecorder, get_metrics_recorder


def test_record_call_counts_and_times():
    metrics = InMemoryMetricsRecorder()

    metrics.record_call("prediction", "succeeded", 12.0)
    metrics.record_call("prediction", "succeeded", 30.0)
    metrics.record_call("prediction", "TransportError", 3.0)

    snapshot = metrics.snapshot()
    assert snapshot["counters"] == {"api.prediction.succeeded": 2, "api.prediction.TransportError": 1}
    assert snapshot["timings"]["api.prediction"] == {"count": 3, "avg_ms": 15.0, "max_ms": 30.0}


def test_reset():
    metrics = InMemoryMetricsRecorder()
    metrics.increment("api.feedback.succeeded")
    metrics.reset()
    assert metrics.counter("api.feedback.succeeded") == 0
    assert metrics.snapshot() == {"counters": {}, "timings": {}}


def test_default_recorder_is_shared():
    assert get_metrics_recorder() is get_metrics_recorder()


def test_timings_fold_into_aggregates():
    metrics = InMemoryMetricsRecorder()

    for value in range(1, 1001):
        metrics.timing("api.detection", float(value))

    stats = metrics.timing_stats("api.detection")
    assert (stats.count, stats.total_ms, stats.max_ms) == (1000, 500500.0, 1000.0)
    assert stats.avg_ms == 500.5


def test_timing_stats_for_unknown_key():
    stats = InMemoryMetricsRecorder().timing_stats("api.prediction")
    assert stats.count == 0
    assert stats.avg_ms == 0.0
