import logging

from ghost_note.utils import logging_config
from ghost_note.utils.logging_config import LOG_LEVEL_ENV, configure_logging
from ghost_note.utils.observability import get_logger
from ghost_note.utils.telemetry import StructuredTelemetry, TelemetryLogger


def test_structured_telemetry_emits_logging_events(caplog):
    telemetry = StructuredTelemetry()
    listener = TelemetryLogger()
    telemetry.add_listener(listener)

    caplog.set_level(logging.INFO, logger="ghost_note.utils.telemetry")

    telemetry.start_trace("test-trace")
    with telemetry.stage("phase"):
        pass
    telemetry.increment("problems")
    telemetry.annotate("lines", 3)

    messages = [record.message for record in caplog.records]
    assert any("Telemetry trace_started: test-trace" in message for message in messages)
    assert any("Telemetry stage_started: phase" in message for message in messages)
    assert any("Telemetry stage: phase" in message for message in messages)
    assert any("Telemetry counter: problems" in message for message in messages)
    assert any("Telemetry metadata: lines" in message for message in messages)


def test_stage_timings_use_injected_clock():
    ticks = iter([1.0, 1.5, 2.0, 2.25])
    telemetry = StructuredTelemetry(clock=lambda: next(ticks))

    telemetry.start_trace("poem")
    with telemetry.stage("meter") as details:
        details["meter"] = "iambic_pentameter"
    with telemetry.stage("meter"):
        pass
    telemetry.increment("problems", 2)

    snapshot = telemetry.snapshot()
    assert snapshot["name"] == "poem"
    assert snapshot["stages"]["meter"]["count"] == 2
    assert snapshot["stages"]["meter"]["total"] == 0.75
    assert snapshot["stages"]["meter"]["max"] == 0.5
    assert snapshot["events"][0]["metadata"] == {"meter": "iambic_pentameter"}
    assert snapshot["counters"] == {"problems": 2.0}


def test_start_trace_resets_collected_data():
    telemetry = StructuredTelemetry()
    first = telemetry.start_trace("one")
    telemetry.increment("problems")

    second = telemetry.start_trace("two")

    assert second == first + 1
    assert telemetry.snapshot()["counters"] == {}


def test_failing_listener_does_not_interrupt_collection():
    seen = []

    def broken(event_type, payload):
        raise RuntimeError("listener down")

    telemetry = StructuredTelemetry(listeners=[broken, lambda event, payload: seen.append(event)])
    telemetry.annotate("title", "Ozymandias")
    telemetry.remove_listener(broken)
    telemetry.increment("problems")

    assert seen == ["metadata", "counter"]
    assert telemetry.snapshot()["metadata"]["title"] == "Ozymandias"


def test_logger_renders_context_suffix(caplog):
    caplog.set_level(logging.INFO, logger="ghost_note.tests")
    logger = get_logger("ghost_note.tests").bind(component="tests")

    logger.info("Checked", context={"lines": 4})

    assert caplog.records[-1].message == 'Checked | {"component": "tests", "lines": 4}'


def test_configure_logging_reads_environment(monkeypatch):
    package_logger = logging.getLogger("ghost_note")
    calls = []
    monkeypatch.setattr(logging, "basicConfig", lambda **kwargs: calls.append(kwargs))
    monkeypatch.setattr(package_logger, "level", package_logger.level)
    monkeypatch.setattr(logging_config, "_CONFIGURED", False)
    monkeypatch.setenv(LOG_LEVEL_ENV, "warning")

    configure_logging()
    assert package_logger.level == logging.WARNING
    assert calls[-1]["level"] == logging.WARNING

    configure_logging("DEBUG")
    assert len(calls) == 1

    configure_logging("DEBUG", force=True)
    assert package_logger.level == logging.DEBUG
    assert calls[-1]["force"] is True
