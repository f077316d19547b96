"""Utility helpers shared across the :mod:`ghost_note` package."""

from __future__ import annotations

from .logging_config import configure_logging
from .syllables import estimate_stress_pattern, estimate_syllable_count
from .telemetry import StructuredTelemetry, TelemetryLogger
from .observability import (
    StructuredLoggerAdapter,
    add_span_attributes,
    create_counter,
    create_histogram,
    get_logger,
    record_exception,
    start_span,
)

__all__ = [
    "configure_logging",
    "estimate_stress_pattern",
    "estimate_syllable_count",
    "StructuredTelemetry",
    "TelemetryLogger",
    "StructuredLoggerAdapter",
    "add_span_attributes",
    "create_counter",
    "create_histogram",
    "get_logger",
    "record_exception",
    "start_span",
]
