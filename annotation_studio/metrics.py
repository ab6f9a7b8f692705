"""
Prometheus Metrics — annotation pipeline observability.

Exposes counters and histograms for:
- Offset resolution outcome per candidate (resolved / not_found / empty)
- Annotations skipped from rendering because they overlap
- Validation errors per stage
- Exported dataset records
- Audit write-barrier blocks
- Stage processing latency

Usage
-----
    from annotation_studio.metrics import record_resolution, timed_stage

    with timed_stage("auto_annotate"):
        result = auto_annotate(document, annotator)

    record_resolution("not_found")
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from typing import Generator

from prometheus_client import Counter, Histogram

logger = logging.getLogger(__name__)


# ---------------------------------------------------------------------------
# Metric definitions
# ---------------------------------------------------------------------------

# Outcome of locating each candidate's text in its document.
RESOLUTION_STATUS: Counter = Counter(
    "annotation_resolution_total",
    "Candidate offset resolution outcome (resolved / not_found / empty)",
    ["status"],
)

# Annotations left out of a rendered partition because they overlap.
OVERLAP_SKIPS: Counter = Counter(
    "annotation_overlap_skips_total",
    "Annotations skipped during rendering due to overlap",
)

# Total validation errors, labelled by stage and error type.
VALIDATION_ERRORS: Counter = Counter(
    "annotation_validation_errors_total",
    "Total validation errors by stage and error type",
    ["stage", "error_type"],
)

EXPORTED_RECORDS: Counter = Counter(
    "annotation_exported_records_total",
    "Dataset records written to the JSONL export",
)

# How many times the audit write barrier blocked a payload.
BARRIER_BLOCKS: Counter = Counter(
    "annotation_write_barrier_blocks_total",
    "Times the write barrier blocked a payload due to validation failure",
    ["stage"],
)

STAGE_LATENCY: Histogram = Histogram(
    "annotation_stage_processing_seconds",
    "Processing time per annotation stage in seconds",
    ["stage"],
    buckets=(0.01, 0.05, 0.1, 0.25, 0.5, 1.0, 2.0, 5.0, 10.0, 30.0),
)


# ---------------------------------------------------------------------------
# Convenience helpers
# ---------------------------------------------------------------------------

def record_resolution(status: str) -> None:
    """Increment the resolution counter for *status*."""
    RESOLUTION_STATUS.labels(status=status).inc()


def record_overlap_skip() -> None:
    OVERLAP_SKIPS.inc()


def record_validation_error(stage: str, error_type: str = "generic") -> None:
    """Increment the validation error counter for *stage*."""
    VALIDATION_ERRORS.labels(stage=stage, error_type=error_type).inc()


def record_exported(count: int = 1) -> None:
    EXPORTED_RECORDS.inc(count)


def record_barrier_block(stage: str) -> None:
    """Increment the write-barrier block counter for *stage*."""
    BARRIER_BLOCKS.labels(stage=stage).inc()


@contextmanager
def timed_stage(stage: str) -> Generator[None, None, None]:
    """
    Context manager that records stage processing latency.

    Usage::

        with timed_stage("export"):
            write_dataset(store, path)
    """
    with STAGE_LATENCY.labels(stage=stage).time():
        yield
