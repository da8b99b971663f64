"""Tests for named reporters and the producer helper."""

import pytest

from telemetry_batcher import BatchReporter, EventProducer, ReporterNotFoundError, ReporterRegistryError, enqueue_event, get_reporter
from telemetry_batcher.reporter import DEFAULT_REPORTER_NAME, register, registered_names, unregister

WAIT = 5.0


def test_named_reporter_is_registered_while_running(exporter):
    reporter = BatchReporter(exporter, name="influx")
    assert "influx" not in registered_names()

    reporter.start()
    assert get_reporter("influx") is reporter

    reporter.stop()
    assert "influx" not in registered_names()


def test_enqueue_event_uses_the_default_reporter(exporter):
    reporter = BatchReporter(exporter, batch_size=2, name=DEFAULT_REPORTER_NAME)
    reporter.start()

    enqueue_event("a", "cfg")
    assert reporter.wait_idle(WAIT)
    reporter.stop()

    assert exporter.calls == [(["a"], "cfg")]


def test_enqueue_event_to_unknown_name_raises():
    with pytest.raises(ReporterNotFoundError):
        enqueue_event("a", "cfg", name="missing")

    with pytest.raises(ReporterNotFoundError):
        get_reporter()


def test_duplicate_name_is_rejected(exporter):
    first = BatchReporter(exporter, name="dup")
    second = BatchReporter(exporter, name="dup")
    first.start()
    try:
        with pytest.raises(ReporterRegistryError):
            second.start()
        assert not second.running
        assert get_reporter("dup") is first
    finally:
        first.stop()
        second.stop(flush=False)


def test_register_and_unregister_by_hand(exporter):
    reporter = BatchReporter(exporter)
    other = BatchReporter(exporter)

    register("manual", reporter)
    register("manual", reporter)  # same reporter again is fine

    assert unregister("manual", other) is False
    assert get_reporter("manual") is reporter
    assert unregister("manual") is True
    assert unregister("manual") is False


def test_producer_emits_with_its_config(exporter):
    reporter = BatchReporter(exporter, batch_size=10)
    producer = EventProducer(reporter, config={"database": "metrics"}, component_name="http")
    for i in range(3):
        producer.emit({"measurement": "request", "value": i})

    reporter.start()
    assert reporter.wait_idle(WAIT)
    reporter.stop()

    assert producer.emitted == 3
    assert exporter.calls == [([{"measurement": "request", "value": i} for i in range(3)], {"database": "metrics"})]
