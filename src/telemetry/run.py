import sys
import threading
from pathlib import Path
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple, Union, TYPE_CHECKING

from telemetry.aggregator import RunSummary, TelemetryAggregator
from telemetry.allow_list import AllowList
from telemetry.counters import ClassificationCounters
from telemetry.errors import DoubleFinalizeError, RunStateError
from telemetry.events import Classification, EnergySample, PacketEvent
from telemetry.identity import normalize_identity
from telemetry.monitors.AccessControlMonitor import AccessControlMonitor
from telemetry.monitors.EnergyMonitor import EnergyMonitor
from telemetry.trace_writer import EnergyTraceWriter

if TYPE_CHECKING:
    from simulator.entities.common import Entity


class RunTelemetry:
    """
    Accumulator of one run: created at run start, read at finalize, discarded after the report.

    The event source delivers packets and energy samples either through
    on_packet_event()/on_energy_sample() or, once attach_to() registered the monitors,
    through the observer update() path. All mutations are serialized by a lock,
    so events can also be delivered by more than one thread.

    Used as a context manager it keeps the energy trace file open for the run
    and closes it on every exit path.
    """

    def __init__(
        self,
        allow_list: Union[AllowList, Iterable[Any]] = (),
        trace_path: Optional[Union[str, Path]] = None,
        verbose: bool = False,
    ):
        if not isinstance(allow_list, AllowList):
            allow_list = AllowList(allow_list)

        self._lock = threading.RLock()
        self.trace_writer = EnergyTraceWriter(trace_path) if trace_path is not None else None
        self.acl_monitor = _LockedAccessControlMonitor(self, allow_list, verbose=verbose)
        self.energy_monitor = _LockedEnergyMonitor(self, self.trace_writer, verbose=verbose)

        self._started = False
        self._summary: Optional[RunSummary] = None
        self._finalize_inputs: Optional[Tuple[Tuple[Tuple[str, float], ...], int]] = None

    # ------------------------------------------------------------------ lifecycle

    def start(self) -> "RunTelemetry":
        """
        Opens the energy trace. A storage failure is reported and the run goes on in memory.
        Without an explicit start() the trace is opened by the first energy sample,
        in that case close() is up to the caller.
        """
        self._started = True
        if self.trace_writer is not None and not self.trace_writer.is_open:
            try:
                self.trace_writer.open()
            except OSError as e:
                print(f"Warning: cannot open energy trace {self.trace_writer.path}: {e}", file=sys.stderr)
        return self

    def close(self) -> None:
        if self.trace_writer is not None:
            self.trace_writer.close()

    def __enter__(self) -> "RunTelemetry":
        return self.start()

    def __exit__(self, exc_type, exc, tb):
        self.close()
        return None

    @property
    def finalized(self) -> bool:
        return self._summary is not None

    def _check_open(self):
        if self._summary is not None:
            raise RunStateError("run already finalized, no further events are accepted")

    # ------------------------------------------------------------------ policy

    @property
    def allow_list(self) -> AllowList:
        return self.acl_monitor.allow_list

    def replace_allow_list(self, allow_list: Union[AllowList, Iterable[Any]]) -> None:
        """Swaps the whole policy. Only allowed before the first packet is seen."""
        if not isinstance(allow_list, AllowList):
            allow_list = AllowList(allow_list)
        with self._lock:
            counters = self.acl_monitor.counters
            if self.finalized or counters.received or counters.rejected:
                raise RunStateError("the allow-list is fixed once the run has started")
            self.acl_monitor.allow_list = allow_list

    # ------------------------------------------------------------------ event ingress

    def attach_to(self, source: "Entity") -> None:
        """Registers the monitors on an observable event source."""
        source.attach_monitor(self.acl_monitor)
        source.attach_monitor(self.energy_monitor)

    def on_packet_event(self, sender_identity: Any, size_bytes: int, timestamp: float) -> Optional[Classification]:
        return self.acl_monitor.classify(PacketEvent(sender_identity, size_bytes, timestamp))

    def on_energy_sample(self, device_identity: Any, remaining_energy_joules: float, timestamp: float) -> bool:
        return self.energy_monitor.record_sample(EnergySample(device_identity, remaining_energy_joules, timestamp))

    # ------------------------------------------------------------------ egress

    @property
    def counters(self) -> ClassificationCounters:
        with self._lock:
            return self.acl_monitor.counters.snapshot()

    @property
    def latest_remaining(self) -> Dict[str, float]:
        with self._lock:
            return dict(self.energy_monitor.latest_remaining)

    def finalize(self, initial_energy_per_device: Mapping[Any, float], intended_sent_count: int) -> RunSummary:
        """
        Computes the run summary. Must be called once the source stopped delivering events.
        Calling it again with the same inputs returns the same summary,
        with different inputs it raises DoubleFinalizeError.
        """
        inputs = (
            tuple(sorted((normalize_identity(d), float(e)) for d, e in initial_energy_per_device.items())),
            int(intended_sent_count),
        )
        with self._lock:
            if self._summary is not None:
                if inputs != self._finalize_inputs:
                    raise DoubleFinalizeError("finalize called again with different inputs")
                return self._summary

            summary = TelemetryAggregator.finalize(
                self.acl_monitor.counters.snapshot(),
                dict(self.energy_monitor.latest_remaining),
                initial_energy_per_device,
                intended_sent_count,
            )
            self._summary = summary
            self._finalize_inputs = inputs
        return summary


class _LockedAccessControlMonitor(AccessControlMonitor):
    """classifier bound to a run: serialized and closed after finalize"""

    def __init__(self, run: RunTelemetry, allow_list: AllowList, verbose: bool):
        super().__init__(allow_list, verbose=verbose)
        self._run = run

    def classify(self, event: PacketEvent) -> Optional[Classification]:
        with self._run._lock:
            self._run._check_open()
            return super().classify(event)


class _LockedEnergyMonitor(EnergyMonitor):
    """recorder bound to a run: serialized and closed after finalize"""

    def __init__(self, run: RunTelemetry, trace_writer: Optional[EnergyTraceWriter], verbose: bool):
        super().__init__(trace_writer, verbose=verbose)
        self._run = run

    def record_sample(self, sample: EnergySample) -> bool:
        with self._run._lock:
            self._run._check_open()
            if not self._run._started:
                self._run.start()
            return super().record_sample(sample)
