"""Logging, metric and tracing plumbing for the analysis pipeline.

Every analysis module logs through :func:`get_logger`, counts through the
handles returned by :func:`create_counter` and :func:`create_histogram`, and
traces through :func:`start_span`. Metric and span problems are absorbed here
so they never change an analysis result.
"""

from __future__ import annotations

import json
import logging
from contextlib import contextmanager
from typing import Any, Dict, Iterable, Optional, Sequence

from opentelemetry import trace as otel_trace
from prometheus_client import REGISTRY, Counter, Histogram

TRACER_NAME = "ghost_note"
METRIC_PREFIX = "ghost_note_"

# Whole-poem analyses take milliseconds; long sonnet sequences a second or two.
DURATION_BUCKETS = (0.001, 0.005, 0.01, 0.025, 0.05, 0.1, 0.25, 0.5, 1.0, 2.5, 5.0)

_SPAN_VALUE_TYPES = (str, bool, int, float)

_log = logging.getLogger(__name__)


def _render_context(context: Dict[str, Any]) -> str:
    try:
        return json.dumps(context, sort_keys=True, default=str)
    except TypeError:
        # Mixed key types cannot be sorted.
        return json.dumps({str(key): str(value) for key, value in context.items()})


class StructuredLoggerAdapter(logging.LoggerAdapter):
    """Logger adapter that appends bound and per-call context as JSON.

    ``log.info("Rhymes detected", context={"scheme": "ABAB"})`` renders as
    ``Rhymes detected | {"component": "rhyme", "scheme": "ABAB"}``.
    """

    def bind(self, **context: Any) -> "StructuredLoggerAdapter":
        return StructuredLoggerAdapter(self.logger, {**self.extra, **context})

    def process(self, msg: str, kwargs: Dict[str, Any]):
        context = dict(self.extra)
        extra_context = kwargs.pop("context", None)
        if isinstance(extra_context, dict):
            context.update(extra_context)
        if not context:
            return msg, kwargs
        return f"{msg} | {_render_context(context)}", kwargs


def get_logger(name: str, **context: Any) -> StructuredLoggerAdapter:
    return StructuredLoggerAdapter(logging.getLogger(name), context)


class MetricHandle:
    """Thin shield around a Prometheus collector.

    A handle whose collector could not be created or labelled is inert, so the
    analysis code can call it unconditionally.
    """

    def __init__(self, collector: Any = None) -> None:
        self._collector = collector

    @property
    def active(self) -> bool:
        return self._collector is not None

    def labels(self, **labels: Any) -> "MetricHandle":
        if self._collector is None:
            return type(self)(None)
        try:
            child = self._collector.labels(**labels)
        except (ValueError, AttributeError) as error:
            _log.debug("Dropping metric labels %s: %s", labels, error)
            child = None
        return type(self)(child)

    def _apply(self, method: str, value: float) -> None:
        if self._collector is None:
            return
        try:
            getattr(self._collector, method)(value)
        except ValueError as error:
            _log.debug("Metric %s(%s) rejected: %s", method, value, error)


class CounterHandle(MetricHandle):
    def inc(self, amount: float = 1.0) -> None:
        self._apply("inc", amount)


class HistogramHandle(MetricHandle):
    def observe(self, value: float) -> None:
        self._apply("observe", value)


def _metric_name(name: str) -> str:
    return name if name.startswith(METRIC_PREFIX) else METRIC_PREFIX + name


def _registered(name: str) -> Any:
    # prometheus_client offers no public lookup; counters are registered
    # without their ``_total`` suffix.
    collectors = REGISTRY._names_to_collectors  # type: ignore[attr-defined]
    return collectors.get(name) or collectors.get(name[: -len("_total")])


def create_counter(
    name: str,
    documentation: str,
    label_names: Optional[Iterable[str]] = None,
) -> CounterHandle:
    """Register a ``ghost_note_`` counter, or reuse it when already registered."""

    name = _metric_name(name)
    try:
        collector = Counter(name, documentation, labelnames=tuple(label_names or ()))
    except ValueError:
        collector = _registered(name)
    return CounterHandle(collector)


def create_histogram(
    name: str,
    documentation: str,
    label_names: Optional[Iterable[str]] = None,
    buckets: Sequence[float] = DURATION_BUCKETS,
) -> HistogramHandle:
    """Register a ``ghost_note_`` histogram, or reuse it when already registered."""

    name = _metric_name(name)
    try:
        collector = Histogram(
            name,
            documentation,
            labelnames=tuple(label_names or ()),
            buckets=tuple(buckets),
        )
    except ValueError:
        collector = _registered(name)
    return HistogramHandle(collector)


def _span_value(value: Any) -> Any:
    if isinstance(value, _SPAN_VALUE_TYPES):
        return value
    if isinstance(value, (list, tuple)) and all(isinstance(item, _SPAN_VALUE_TYPES) for item in value):
        return list(value)
    return str(value)


def add_span_attributes(span: Any, attributes: Dict[str, Any]) -> None:
    """Set ``attributes`` on ``span``, stringifying values OpenTelemetry rejects."""

    if span is None:
        return
    for key, value in attributes.items():
        if isinstance(key, str) and value is not None:
            span.set_attribute(key, _span_value(value))


def record_exception(span: Any, error: BaseException) -> None:
    if span is None:
        return
    span.record_exception(error)
    span.set_attribute("error", True)
    span.set_attribute("error.type", type(error).__name__)


@contextmanager
def start_span(name: str, attributes: Optional[Dict[str, Any]] = None):
    """Open ``name`` as the current span on the ``ghost_note`` tracer."""

    tracer = otel_trace.get_tracer(TRACER_NAME)
    with tracer.start_as_current_span(name) as span:
        add_span_attributes(span, attributes or {})
        yield span


__all__ = [
    "DURATION_BUCKETS",
    "METRIC_PREFIX",
    "StructuredLoggerAdapter",
    "get_logger",
    "MetricHandle",
    "CounterHandle",
    "HistogramHandle",
    "create_counter",
    "create_histogram",
    "start_span",
    "add_span_attributes",
    "record_exception",
]
