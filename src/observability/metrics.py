"""
Prometheus metrics collection for client-ingest

This module provides metrics instrumentation for monitoring ingestion
throughput, data quality and storage health.
"""
import os
from prometheus_client import (
    Counter,
    Histogram,
    Gauge,
    CollectorRegistry,
    generate_latest,
    CONTENT_TYPE_LATEST,
)
from typing import Optional


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# INGESTION METRICS
# =======================

lines_read_total = Counter(
    name="ingest_lines_read_total",
    documentation="Total number of physical lines read from input files",
    labelnames=["input_file"],
    registry=REGISTRY,
)

records_total = Counter(
    name="ingest_records_total",
    documentation="Total number of records by outcome",
    # status: persisted, rejected, duplicate, failed, error
    labelnames=["input_file", "status"],
    registry=REGISTRY,
)

duplicates_total = Counter(
    name="ingest_duplicates_total",
    documentation="Total number of duplicate records filtered",
    labelnames=["input_file", "tier"],  # tier: batch, storage, constraint
    registry=REGISTRY,
)

run_duration_seconds = Histogram(
    name="ingest_run_duration_seconds",
    documentation="Wall clock duration of complete ingestion runs",
    labelnames=["input_file"],
    buckets=[1.0, 5.0, 10.0, 30.0, 60.0, 120.0, 300.0, 600.0, 1800.0],
    registry=REGISTRY,
)

runs_total = Counter(
    name="ingest_runs_total",
    documentation="Total number of ingestion runs",
    labelnames=["status"],  # status: success, failure, rejected
    registry=REGISTRY,
)

# =======================
# BATCH METRICS
# =======================

batch_size = Histogram(
    name="ingest_batch_size_records",
    documentation="Number of records in each flushed batch",
    labelnames=["input_file"],
    buckets=[1, 10, 50, 100, 200, 500, 1000, 5000],
    registry=REGISTRY,
)

batches_flushed_total = Counter(
    name="ingest_batches_flushed_total",
    documentation="Total number of batches flushed",
    labelnames=["input_file", "status"],  # status: success, failure
    registry=REGISTRY,
)

flush_duration_seconds = Histogram(
    name="ingest_flush_duration_seconds",
    documentation="Time spent deduplicating and persisting one batch",
    labelnames=["input_file"],
    buckets=[0.01, 0.05, 0.1, 0.5, 1.0, 5.0, 10.0],
    registry=REGISTRY,
)

bulk_fallbacks_total = Counter(
    name="ingest_bulk_fallbacks_total",
    documentation="Total number of bulk saves that fell back to row-by-row saves",
    labelnames=["input_file"],
    registry=REGISTRY,
)

# =======================
# SYSTEM METRICS
# =======================

memory_usage_bytes = Gauge(
    name="ingest_memory_usage_bytes",
    documentation="Resident memory of the ingestion process in bytes",
    labelnames=["component"],
    registry=REGISTRY,
)

cpu_seconds = Gauge(
    name="ingest_run_cpu_seconds",
    documentation="CPU time consumed by the current run",
    labelnames=["mode"],  # mode: user, system
    registry=REGISTRY,
)


# =======================
# HELPER FUNCTIONS
# =======================

def generate_metrics() -> bytes:
    """
    Generate Prometheus metrics in text format

    Returns:
        Metrics in Prometheus text format
    """
    return generate_latest(REGISTRY)


def get_content_type() -> str:
    return CONTENT_TYPE_LATEST


def start_metrics_server(port: Optional[int] = None) -> None:
    """
    Start HTTP server for Prometheus metrics

    Args:
        port: Port to listen on (defaults to env var METRICS_PORT or 8000)
    """
    # Lazy import: no port binding unless the endpoint is requested
    from prometheus_client import start_http_server

    metrics_port = port or int(os.getenv("METRICS_PORT", "8000"))
    start_http_server(metrics_port, registry=REGISTRY)


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    if value <= 0:
        return
    counter.labels(**labels).inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    gauge.labels(**labels).set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    histogram.labels(**labels).observe(value)


# =======================
# METRICS COLLECTOR CLASS
# =======================

class MetricsCollector:
    """
    Metrics facade used by the ingestion pipeline.

    Keeps label handling in one place so pipeline code only reports events.
    """

    def __init__(self, input_file: str = "unknown"):
        self.input_file = input_file

    def bind(self, input_file: str) -> "MetricsCollector":
        """Return a collector labelled with another input file."""
        return MetricsCollector(input_file=input_file)

    def record_lines_read(self, count: int = 1) -> None:
        increment_counter(lines_read_total, count, input_file=self.input_file)

    def record_rejected_line(self) -> None:
        increment_counter(records_total, 1, input_file=self.input_file, status="rejected")

    def record_line_error(self) -> None:
        increment_counter(records_total, 1, input_file=self.input_file, status="error")

    def record_batch(
        self,
        record_count: int,
        persisted: int,
        failed: int,
        internal_duplicates: int,
        storage_duplicates: int,
        constraint_duplicates: int = 0,
        used_fallback: bool = False,
        duration_seconds: float = 0.0,
        success: bool = True,
    ) -> None:
        """
        Record the outcome of one flushed batch.

        Args:
            record_count: Records drained from the accumulator
            persisted: Records saved
            failed: Records whose save failed
            internal_duplicates: Records dropped by the intra-batch pass
            storage_duplicates: Records dropped because their key was stored
            constraint_duplicates: Failed saves caused by the uniqueness constraint
            used_fallback: Whether the bulk save fell back to single rows
            duration_seconds: Time spent in dedup and commit
            success: False when the flush itself raised
        """
        labels = {"input_file": self.input_file}
        status = "success" if success else "failure"
        increment_counter(batches_flushed_total, 1, status=status, **labels)
        if record_count > 0:
            observe_histogram(batch_size, record_count, **labels)
        if duration_seconds > 0:
            observe_histogram(flush_duration_seconds, duration_seconds, **labels)

        increment_counter(records_total, persisted, status="persisted", **labels)
        increment_counter(records_total, failed, status="failed", **labels)
        increment_counter(
            records_total, internal_duplicates + storage_duplicates, status="duplicate", **labels
        )
        increment_counter(duplicates_total, internal_duplicates, tier="batch", **labels)
        increment_counter(duplicates_total, storage_duplicates, tier="storage", **labels)
        increment_counter(duplicates_total, constraint_duplicates, tier="constraint", **labels)
        if used_fallback:
            increment_counter(bulk_fallbacks_total, 1, **labels)

    def record_failed_batch(self, record_count: int, duration_seconds: float = 0.0) -> None:
        """Record a flush that raised; every record of it counts as an error."""
        self.record_batch(
            record_count=record_count,
            persisted=0,
            failed=0,
            internal_duplicates=0,
            storage_duplicates=0,
            duration_seconds=duration_seconds,
            success=False,
        )
        increment_counter(records_total, record_count, input_file=self.input_file, status="error")

    def record_resources(self, memory_mb: float, cpu_user_ms: float, cpu_system_ms: float) -> None:
        set_gauge(memory_usage_bytes, memory_mb * 1024 * 1024, component="pipeline")
        set_gauge(cpu_seconds, cpu_user_ms / 1000, mode="user")
        set_gauge(cpu_seconds, cpu_system_ms / 1000, mode="system")

    def record_run(self, duration_seconds: float, success: bool = True) -> None:
        increment_counter(runs_total, 1, status="success" if success else "failure")
        if success:
            observe_histogram(run_duration_seconds, duration_seconds, input_file=self.input_file)

    def record_run_rejected(self) -> None:
        """A run was refused because another one is in progress."""
        increment_counter(runs_total, 1, status="rejected")
