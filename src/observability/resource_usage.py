"""
Runtime resource accounting for ingestion runs.

Elapsed wall time, resident memory and CPU time consumed since the start of
a run, read through psutil.
"""

import time
from dataclasses import dataclass

import psutil


@dataclass(frozen=True)
class ResourceSnapshot:
    """Resource usage measured relative to a ResourceTracker start."""

    elapsed_ms: float
    memory_mb: float
    cpu_user_ms: float
    cpu_system_ms: float

    def as_log_fields(self) -> dict[str, float]:
        return {
            "elapsed_ms": round(self.elapsed_ms, 2),
            "memory_mb": round(self.memory_mb, 2),
            "cpu_user_ms": round(self.cpu_user_ms, 2),
            "cpu_system_ms": round(self.cpu_system_ms, 2),
        }


class ResourceTracker:
    """
    Measures resource usage of the current process from a starting point.

    Usage:
        tracker = ResourceTracker()
        ... work ...
        snapshot = tracker.snapshot()
    """

    def __init__(self):
        self._process = psutil.Process()
        self.reset()

    def reset(self) -> None:
        """Restart measurement from now."""
        self._start = time.perf_counter()
        self._start_cpu = self._process.cpu_times()

    def snapshot(self) -> ResourceSnapshot:
        cpu = self._process.cpu_times()
        memory = self._process.memory_info()
        return ResourceSnapshot(
            elapsed_ms=(time.perf_counter() - self._start) * 1000,
            memory_mb=memory.rss / (1024 * 1024),
            cpu_user_ms=max(cpu.user - self._start_cpu.user, 0.0) * 1000,
            cpu_system_ms=max(cpu.system - self._start_cpu.system, 0.0) * 1000,
        )
