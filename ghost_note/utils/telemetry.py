"""Per-analysis telemetry: stage timings, counters and trace metadata.

:func:`ghost_note.core.analyzer.analyze_poem` accepts a
:class:`StructuredTelemetry` and times each of its pipeline stages through
it. Callers read the result back with :meth:`StructuredTelemetry.snapshot` or
attach a :class:`TelemetryLogger` to stream events into the log.
"""

from __future__ import annotations

import logging
import threading
import time
from collections import deque
from contextlib import contextmanager
from copy import deepcopy
from dataclasses import dataclass
from typing import Any, Callable, Deque, Dict, Iterable, Iterator, List, Optional

from .observability import get_logger

TelemetryListener = Callable[[str, Dict[str, Any]], None]

_log = get_logger(__name__).bind(component="telemetry")


@dataclass
class StageTiming:
    """Aggregate timings for every run of one named stage."""

    count: int = 0
    total: float = 0.0
    min: float = 0.0
    max: float = 0.0

    def add(self, duration: float) -> None:
        if self.count == 0:
            self.min = self.max = duration
        else:
            self.min = min(self.min, duration)
            self.max = max(self.max, duration)
        self.count += 1
        self.total += duration

    @property
    def avg(self) -> float:
        return self.total / self.count if self.count else 0.0

    def as_dict(self) -> Dict[str, float]:
        return {
            "count": self.count,
            "total": self.total,
            "min": self.min,
            "max": self.max,
            "avg": self.avg,
        }


class StructuredTelemetry:
    """Collects what happened during one analysis run.

    Each change is forwarded to the registered listeners as
    ``(event_type, payload)``. Event types are ``trace_started``,
    ``stage_started``, ``stage``, ``counter`` and ``metadata``.
    """

    def __init__(
        self,
        clock: Optional[Callable[[], float]] = None,
        *,
        max_events: int = 128,
        listeners: Optional[Iterable[TelemetryListener]] = None,
    ) -> None:
        self._clock = clock or time.perf_counter
        self._lock = threading.RLock()
        self._listeners: List[TelemetryListener] = list(listeners or ())
        self._max_events = max(1, int(max_events))
        self._trace_id = 0
        self._reset(None)

    def _reset(self, name: Optional[str]) -> None:
        self._trace_name = name
        self._timings: Dict[str, StageTiming] = {}
        self._counters: Dict[str, float] = {}
        self._events: Deque[Dict[str, Any]] = deque(maxlen=self._max_events)
        self._metadata: Dict[str, Any] = {} if name is None else {"trace_name": name}

    def _notify(self, event_type: str, **payload: Any) -> None:
        with self._lock:
            listeners = list(self._listeners)
        for listener in listeners:
            try:
                listener(event_type, dict(payload))
            except Exception as error:
                _log.warning(
                    "Telemetry listener failed",
                    context={"event": event_type, "error": repr(error)},
                )

    def add_listener(self, listener: TelemetryListener) -> None:
        with self._lock:
            self._listeners.append(listener)

    def remove_listener(self, listener: TelemetryListener) -> None:
        with self._lock:
            self._listeners = [known for known in self._listeners if known is not listener]

    def start_trace(self, name: str) -> int:
        """Drop everything collected so far and start trace ``name``."""

        with self._lock:
            self._trace_id += 1
            trace_id = self._trace_id
            self._reset(name)
        self._notify("trace_started", trace_id=trace_id, name=name)
        return trace_id

    def record_stage(
        self,
        name: str,
        duration: float,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> None:
        duration = max(0.0, float(duration))
        details = dict(metadata or {})
        event: Dict[str, Any] = {"name": name, "duration": duration}
        if details:
            event["metadata"] = details
        with self._lock:
            self._timings.setdefault(name, StageTiming()).add(duration)
            self._events.append(event)
        self._notify("stage", name=name, duration=duration, metadata=details)

    @contextmanager
    def stage(
        self,
        name: str,
        metadata: Optional[Dict[str, Any]] = None,
    ) -> Iterator[Dict[str, Any]]:
        """Time the enclosed block as stage ``name``.

        The yielded dict is recorded alongside the timing, so the block can
        note what the stage found::

            with telemetry.stage("rhyme") as details:
                details["scheme"] = rhyme.scheme
        """

        details: Dict[str, Any] = dict(metadata or {})
        self._notify("stage_started", name=name)
        started = self._clock()
        try:
            yield details
        finally:
            self.record_stage(name, self._clock() - started, details)

    def increment(self, name: str, amount: float = 1.0) -> None:
        delta = float(amount)
        with self._lock:
            value = self._counters[name] = self._counters.get(name, 0.0) + delta
        self._notify("counter", name=name, delta=delta, value=value)

    def annotate(self, key: str, value: Any) -> None:
        with self._lock:
            self._metadata[key] = value
        self._notify("metadata", key=key, value=value)

    def snapshot(self) -> Dict[str, Any]:
        """Detached copy of the current trace."""

        with self._lock:
            return {
                "trace_id": self._trace_id,
                "name": self._trace_name,
                "stages": {name: timing.as_dict() for name, timing in self._timings.items()},
                "counters": dict(self._counters),
                "events": deepcopy(list(self._events)),
                "metadata": deepcopy(self._metadata),
            }


class TelemetryLogger:
    """Telemetry listener that logs each event as ``Telemetry <type>: <label>``."""

    def __init__(
        self,
        *,
        logger: Optional[logging.LoggerAdapter] = None,
        level: int = logging.INFO,
        level_map: Optional[Dict[str, int]] = None,
    ) -> None:
        self._logger = logger or _log
        self._level = level
        self._level_map = dict(level_map or {})

    @staticmethod
    def _label(payload: Dict[str, Any]) -> Any:
        for field in ("name", "key", "trace_id"):
            if payload.get(field):
                return payload[field]
        return "event"

    def __call__(self, event_type: str, payload: Dict[str, Any]) -> None:
        level = self._level_map.get(event_type, self._level)
        if not self._logger.isEnabledFor(level):
            return
        context = {"telemetry.event": event_type}
        context.update((str(key), value) for key, value in payload.items())
        self._logger.log(level, f"Telemetry {event_type}: {self._label(payload)}", context=context)


__all__ = ["StageTiming", "StructuredTelemetry", "TelemetryLogger", "TelemetryListener"]
