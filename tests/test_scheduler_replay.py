"""Tests for the event scheduler and the trace replay source."""

import pandas as pd
import pytest

from simulator.engine.Scheduler import Scheduler
from simulator.engine.common.Event import Event
from simulator.entities.sources.ReplaySource import ReplaySource
from telemetry.run import RunTelemetry


def _recorder(scheduler, order):
    def callback(label):
        order.append((scheduler.now(), label))
    return callback


def test_events_run_in_time_then_scheduling_order() -> None:
    scheduler = Scheduler()
    order = []
    record = _recorder(scheduler, order)

    scheduler.schedule(Event(2.0, callback=record, label="c"))
    scheduler.schedule(Event(1.0, callback=record, label="a"))
    scheduler.schedule(Event(1.0, callback=record, label="b"))

    assert scheduler.run() == 3
    assert order == [(1.0, "a"), (1.0, "b"), (2.0, "c")]
    assert scheduler.is_empty()


def test_priority_breaks_ties() -> None:
    scheduler = Scheduler()
    order = []
    record = _recorder(scheduler, order)

    scheduler.schedule(Event(1.0, priority=1, callback=record, label="late"))
    scheduler.schedule(Event(1.0, priority=0, callback=record, label="early"))
    scheduler.run()

    assert [label for _, label in order] == ["early", "late"]


def test_run_until_leaves_events_at_the_stop_time() -> None:
    scheduler = Scheduler()
    order = []
    record = _recorder(scheduler, order)
    for t in (1.0, 2.999999, 3.0, 4.0):
        scheduler.schedule(Event(t, callback=record, label=t))

    assert scheduler.run(until=3.0) == 2
    assert scheduler.now() == 3.0
    assert scheduler.peek_time() == 3.0


def test_cannot_schedule_in_the_past() -> None:
    scheduler = Scheduler()
    scheduler.schedule(Event(2.0))
    scheduler.run()

    with pytest.raises(ValueError):
        scheduler.schedule(Event(1.0))


def test_unscheduled_event_does_not_run() -> None:
    scheduler = Scheduler()
    order = []
    event = Event(1.0, callback=_recorder(scheduler, order), label="x")
    scheduler.schedule(event)
    scheduler.unschedule(event)

    assert scheduler.run() == 0
    assert order == []


def test_flush_resets_the_clock() -> None:
    scheduler = Scheduler()
    scheduler.schedule(Event(5.0))
    scheduler.run()
    scheduler.flush()

    assert scheduler.now() == 0.0
    assert scheduler.get_queue_length() == 0


def test_replay_feeds_the_run(security_trace) -> None:
    scheduler = Scheduler()
    source = ReplaySource(scheduler)
    assert source.load(security_trace) == 4

    run = RunTelemetry(["10.1.1.2"])
    run.attach_to(source)
    scheduler.run(until=3.0)

    counters = run.counters
    assert counters.authorized == 2
    assert counters.unauthorized == 1
    assert counters.received == 3


def test_replay_energy_and_malformed_rows() -> None:
    trace = pd.DataFrame(
        {
            "time": [1.0, 2.0, 2.0, 3.0],
            "kind": ["energy", "energy", "packet", "PACKET"],
            "identity": ["device1", "device1", None, "10.1.1.2"],
            "value": [0.9, 0.6, 64, 128],
        }
    )
    scheduler = Scheduler()
    source = ReplaySource(scheduler)
    source.load(trace)

    run = RunTelemetry(["10.1.1.2"])
    run.attach_to(source)
    scheduler.run()

    assert run.latest_remaining == {"device1": 0.6}
    assert run.counters.rejected == 1
    assert run.counters.authorized == 1


def test_unknown_kind_is_refused() -> None:
    trace = pd.DataFrame({"time": [1.0], "kind": ["reboot"], "identity": ["device1"], "value": [0]})

    with pytest.raises(ValueError):
        ReplaySource(Scheduler()).load(trace)


def test_missing_columns_are_refused(tmp_path) -> None:
    path = tmp_path / "bad.csv"
    path.write_text("time,identity\n1.0,device1\n")

    with pytest.raises(ValueError):
        ReplaySource.read_trace(path)


def test_bad_timestamps_are_rejected_not_fatal(tmp_path, capsys) -> None:
    path = tmp_path / "events.csv"
    path.write_text(
        "time,kind,identity,value\n"
        "-0.5,packet,10.1.1.2,64\n"
        ",packet,10.1.1.2,64\n"
        ",energy,device1,0.5\n"
        "1.0,packet,10.1.1.2,64\n"
    )
    scheduler = Scheduler()
    source = ReplaySource(scheduler)
    assert source.load(path) == 4

    run = RunTelemetry(["10.1.1.2"])
    run.attach_to(source)
    scheduler.run(until=3.0)

    counters = run.counters
    assert counters.rejected == 2
    assert counters.authorized == 1
    assert counters.received == 1
    assert run.energy_monitor.rejected == 1
    assert run.latest_remaining == {}
    assert "Warning: rejected packet event" in capsys.readouterr().err


def test_non_numeric_timestamp_is_rejected() -> None:
    trace = pd.DataFrame(
        {"time": ["soon", "2.0"], "kind": ["packet", "packet"], "identity": ["10.1.1.2", "10.1.1.3"], "value": [64, 64]}
    )
    scheduler = Scheduler()
    source = ReplaySource(scheduler)
    source.load(trace)

    run = RunTelemetry(["10.1.1.2"])
    run.attach_to(source)
    scheduler.run()

    assert run.counters.rejected == 1
    assert run.counters.unauthorized == 1
