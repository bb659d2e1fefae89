"""Tests for the per-run accumulator: lifecycle, finalize rules and concurrent delivery."""

import threading

import pytest

from simulator.entities.common import Entity
from telemetry.errors import DoubleFinalizeError, RunStateError
from telemetry.events import Classification, EnergySample, PacketEvent
from telemetry.run import RunTelemetry


def test_authorized_and_rogue_client() -> None:
    run = RunTelemetry(["10.1.1.2"])

    assert run.on_packet_event("10.1.1.2", 1024, 2.0) is Classification.AUTHORIZED
    assert run.on_packet_event("10.1.1.3", 512, 2.5) is Classification.UNAUTHORIZED

    summary = run.finalize({}, 0)
    assert summary.authorized_count == 1
    assert summary.unauthorized_count == 1
    assert summary.total_packets_received == 2
    assert summary.delivery_ratio_percent == 0.0


def test_two_devices_energy() -> None:
    run = RunTelemetry()
    run.on_energy_sample("Device1", 0.9, 1.0)
    run.on_energy_sample("Device1", 0.8, 2.0)

    summary = run.finalize({"Device1": 1.0, "Device2": 1.0}, 0)

    assert summary.energy_consumed_by("Device1") == pytest.approx(0.2)
    assert summary.energy_consumed_by("Device2") == pytest.approx(0.0)
    assert summary.average_energy_consumed_joules == pytest.approx(0.1)


def test_finalize_twice_with_same_inputs_returns_same_summary() -> None:
    run = RunTelemetry(["10.1.1.2"])
    run.on_packet_event("10.1.1.2", 10, 1.0)

    first = run.finalize({"device1": 1.0}, 4)
    second = run.finalize({"DEVICE1": 1.0}, 4)

    assert second is first
    assert run.finalized


def test_finalize_with_different_inputs_raises() -> None:
    run = RunTelemetry()
    run.finalize({"device1": 1.0}, 4)

    with pytest.raises(DoubleFinalizeError):
        run.finalize({"device1": 1.0}, 5)
    with pytest.raises(DoubleFinalizeError):
        run.finalize({"device1": 2.0}, 4)


def test_events_after_finalize_are_refused() -> None:
    run = RunTelemetry()
    run.finalize({}, 0)

    with pytest.raises(RunStateError):
        run.on_packet_event("10.1.1.2", 10, 1.0)
    with pytest.raises(RunStateError):
        run.on_energy_sample("device1", 0.5, 1.0)


def test_replace_allow_list_before_first_packet() -> None:
    run = RunTelemetry(["10.1.1.2"])
    run.replace_allow_list(["10.1.1.3"])

    assert run.on_packet_event("10.1.1.3", 10, 1.0) is Classification.AUTHORIZED
    assert list(run.allow_list) == ["10.1.1.3"]

    with pytest.raises(RunStateError):
        run.replace_allow_list(["10.1.1.2"])


def test_malformed_events_are_counted_apart() -> None:
    run = RunTelemetry(["10.1.1.2"])
    assert run.on_packet_event(None, 10, 1.0) is None
    assert run.on_energy_sample("device1", -1.0, 1.0) is False

    assert run.counters.rejected == 1
    assert run.counters.received == 0
    assert run.latest_remaining == {}
    assert run.finalize({}, 0).rejected_count == 1


def test_observer_delivery() -> None:
    run = RunTelemetry(["10.1.1.2"])
    source = Entity()
    run.attach_to(source)

    source._notify_monitors(PacketEvent("10.1.1.2", 64, 1.0))
    source._notify_monitors(EnergySample("10.1.1.1", 0.4, 1.0))

    assert run.counters.authorized == 1
    assert run.latest_remaining == {"10.1.1.1": 0.4}


def test_trace_file_lifecycle(tmp_path) -> None:
    path = tmp_path / "energy-log.txt"
    with RunTelemetry(trace_path=path) as run:
        run.on_energy_sample("device1", 0.9, 1.0)
        assert run.trace_writer.is_open

    assert not run.trace_writer.is_open
    assert path.read_text() == "1.0,device1,0.9\n"


def test_unwritable_trace_keeps_run_in_memory(tmp_path, capsys) -> None:
    blocker = tmp_path / "not-a-dir"
    blocker.write_text("")

    with RunTelemetry(trace_path=blocker / "energy-log.txt") as run:
        assert "cannot open energy trace" in capsys.readouterr().err
        run.on_energy_sample("device1", 0.7, 1.0)

    assert run.energy_monitor.trace_failures == 1
    assert run.finalize({"device1": 1.0}, 0).energy_consumed_by("device1") == pytest.approx(0.3)


def test_concurrent_delivery_loses_no_updates() -> None:
    run = RunTelemetry(["10.1.1.2"])
    per_thread = 500

    def deliver(sender):
        for i in range(per_thread):
            run.on_packet_event(sender, 64, float(i))

    threads = [
        threading.Thread(target=deliver, args=(sender,))
        for sender in ["10.1.1.2", "10.1.1.3", "10.1.1.2", "10.1.1.4"]
    ]
    for thread in threads:
        thread.start()
    for thread in threads:
        thread.join()

    counters = run.counters
    assert counters.received == 4 * per_thread
    assert counters.authorized == 2 * per_thread
    assert counters.unauthorized == 2 * per_thread


def test_client_and_rogue_by_label() -> None:
    run = RunTelemetry(["ClientA"])
    for sender in ["ClientA", "Rogue", "ClientA"]:
        run.on_packet_event(sender, 100, 1.0)

    counters = run.counters
    assert (counters.authorized, counters.unauthorized, counters.received) == (2, 1, 3)


def test_trace_opened_by_first_sample_without_context_manager(tmp_path) -> None:
    path = tmp_path / "energy-log.txt"
    run = RunTelemetry(trace_path=path)
    run.on_energy_sample("device1", 0.9, 1.0)
    run.on_energy_sample("device1", 0.8, 2.0)
    run.close()

    assert run.energy_monitor.trace_failures == 0
    assert path.read_text().splitlines() == ["1.0,device1,0.9", "2.0,device1,0.8"]


def test_invalid_finalize_inputs_are_never_frozen() -> None:
    run = RunTelemetry()

    for _ in range(2):
        with pytest.raises(ValueError):
            run.finalize({"device1": float("nan")}, 0)
    with pytest.raises(ValueError):
        run.finalize({"Device1": 1.0, "device1": 1.0}, 0)

    assert not run.finalized
    assert run.finalize({"device1": 1.0}, 0).per_device_energy_consumed == {"device1": 0.0}
