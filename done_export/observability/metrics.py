"""
Prometheus metrics collection for done-export

This module provides metrics instrumentation for export runs: how many
runs ended in each terminal state, how many rows were exported and how
long the runs took. Metrics live in a private registry and are written
out by the CLI (see --metrics-file) for a node-exporter textfile collector.
"""
from pathlib import Path

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    Histogram,
    generate_latest,
)


# Global registry for metrics
REGISTRY = CollectorRegistry()


# =======================
# RUN METRICS
# =======================

# Runs counter by terminal state
export_runs_total = Counter(
    name="done_export_runs_total",
    documentation="Total number of export runs by terminal state",
    labelnames=["list_title", "status"],  # status: completed, no_rows, failed
    registry=REGISTRY,
)

# Rows written to CSV
rows_exported_total = Counter(
    name="done_export_rows_exported_total",
    documentation="Total number of list items written to exported CSV files",
    labelnames=["list_title"],
    registry=REGISTRY,
)

# Uploaded payload size
upload_bytes_total = Counter(
    name="done_export_upload_bytes_total",
    documentation="Total number of CSV bytes uploaded to the document library",
    labelnames=["list_title"],
    registry=REGISTRY,
)

# Run duration histogram
run_duration_seconds = Histogram(
    name="done_export_run_duration_seconds",
    documentation="Time spent in one export run in seconds",
    labelnames=["list_title"],
    buckets=[0.1, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0, 60.0, 120.0],
    registry=REGISTRY,
)

# Busy indicator
run_in_progress = Gauge(
    name="done_export_run_in_progress",
    documentation="Export run currently in flight (1) or idle (0)",
    labelnames=["list_title"],
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


def write_metrics_file(path: str | Path) -> Path:
    """
    Write the current metrics to a file in Prometheus text format.

    Args:
        path: Destination file (e.g. a node-exporter textfile collector path)

    Returns:
        Path that was written
    """
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_bytes(generate_metrics())
    return path


def increment_counter(counter: Counter, value: float = 1.0, **labels) -> None:
    """
    Increment a counter metric

    Args:
        counter: Prometheus Counter metric
        value: Amount to increment (default: 1.0)
        **labels: Label values for the metric
    """
    counter.labels(**labels).inc(value)


def set_gauge(gauge: Gauge, value: float, **labels) -> None:
    """Set a gauge metric value"""
    gauge.labels(**labels).set(value)


def observe_histogram(histogram: Histogram, value: float, **labels) -> None:
    """Observe a value in a histogram metric"""
    histogram.labels(**labels).observe(value)


# =======================
# RUN HELPERS
# =======================

def record_run(
    list_title: str,
    status: str,
    row_count: int,
    duration_seconds: float,
    uploaded_bytes: int = 0,
) -> None:
    """
    Record the outcome of one export run.

    Args:
        list_title: Source list the run exported from
        status: Terminal state (completed, no_rows, failed)
        row_count: Rows written to the CSV (0 unless completed)
        duration_seconds: Run duration in seconds
        uploaded_bytes: Size of the uploaded payload
    """
    increment_counter(export_runs_total, 1, list_title=list_title, status=status)
    observe_histogram(run_duration_seconds, duration_seconds, list_title=list_title)

    if row_count > 0:
        increment_counter(rows_exported_total, row_count, list_title=list_title)
    if uploaded_bytes > 0:
        increment_counter(upload_bytes_total, uploaded_bytes, list_title=list_title)
