"""Per-endpoint call outcome metrics.

The client counts every finished call as ``api.<endpoint>.<outcome>`` and
times it under ``api.<endpoint>``. Timings are folded into running
aggregates so a recorder shared for a whole session stays the same size.
"""

from dataclasses import dataclass
from typing import Dict
import threading


@dataclass
class TimingStats:
    count: int = 0
    total_ms: float = 0.0
    max_ms: float = 0.0

    def add(self, value_ms: float) -> None:
        self.count += 1
        self.total_ms += value_ms
        self.max_ms = max(self.max_ms, value_ms)

    @property
    def avg_ms(self) -> float:
        return self.total_ms / self.count if self.count else 0.0


class MetricsRecorder:
    def increment(self, key: str, value: int = 1) -> None:
        raise NotImplementedError

    def timing(self, key: str, value_ms: float) -> None:
        raise NotImplementedError

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        raise NotImplementedError

    def record_call(self, endpoint: str, outcome: str, elapsed_ms: float) -> None:
        """Count one finished call as ``api.<endpoint>.<outcome>`` and time it."""
        self.increment(f"api.{endpoint}.{outcome}")
        self.timing(f"api.{endpoint}", elapsed_ms)


class InMemoryMetricsRecorder(MetricsRecorder):
    """Thread-safe; calls may finish on any loop or thread."""

    def __init__(self) -> None:
        self._counters: Dict[str, int] = {}
        self._timings: Dict[str, TimingStats] = {}
        self._lock = threading.Lock()

    def increment(self, key: str, value: int = 1) -> None:
        with self._lock:
            self._counters[key] = self._counters.get(key, 0) + int(value)

    def timing(self, key: str, value_ms: float) -> None:
        with self._lock:
            self._timings.setdefault(key, TimingStats()).add(float(value_ms))

    def counter(self, key: str) -> int:
        with self._lock:
            return self._counters.get(key, 0)

    def timing_stats(self, key: str) -> TimingStats:
        with self._lock:
            stats = self._timings.get(key, TimingStats())
            return TimingStats(stats.count, stats.total_ms, stats.max_ms)

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._timings.clear()

    def snapshot(self) -> Dict[str, Dict[str, float]]:
        with self._lock:
            timings = {
                key: {"count": stats.count, "avg_ms": stats.avg_ms, "max_ms": stats.max_ms}
                for key, stats in self._timings.items()
            }
            return {"counters": dict(self._counters), "timings": timings}


_DEFAULT_RECORDER = InMemoryMetricsRecorder()


def get_metrics_recorder() -> MetricsRecorder:
    """Recorder shared by every client that is not given its own."""
    return _DEFAULT_RECORDER
