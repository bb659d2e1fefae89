import sys
from typing import Dict, Optional, TYPE_CHECKING

from simulator.engine.common.Monitor import Monitor
from telemetry.errors import MalformedEventError
from telemetry.events import EnergySample
from telemetry.trace_writer import EnergyTraceWriter

# Avoid circular import issues at type-checking time
if TYPE_CHECKING:
    from simulator.entities.common import Entity, EntitySignal


class EnergyMonitor(Monitor):
    """
    Monitor that records the remaining energy of each device.
    Every sample goes to the in-memory trace (self.log), to the persistent
    trace file if a writer is given, and updates the latest value per device.
    """

    signal_types = (EnergySample,)

    def __init__(self, trace_writer: Optional[EnergyTraceWriter] = None, monitor_name: str = "energy", verbose=True):
        super().__init__(monitor_name=monitor_name, verbose=verbose)

        self.trace_writer = trace_writer
        self.latest_remaining: Dict[str, float] = {} # key: canonical device identity, value: last remaining energy (J)
        self.rejected = 0
        self.trace_failures = 0

    def on_signal(self, entity: "Entity", signal: "EntitySignal"):
        self.record_sample(signal)

    def record_sample(self, sample: EnergySample) -> bool:
        """
        Returns False if the sample was rejected as malformed.
        Samples are trusted to arrive in timestamp order: the last call wins.
        """
        try:
            device = sample.validate()
        except MalformedEventError as e:
            self.rejected += 1
            print(f"Warning: rejected energy sample at t={sample.timestamp}: {e}", file=sys.stderr)
            return False

        record = sample.get_log_data()
        timestamp = record["time"]
        remaining = record["remaining_J"]
        self.log.append(record)

        if self.trace_writer is not None:
            try:
                self.trace_writer.write(timestamp, device, remaining)
            except OSError as e:
                # the sample is still folded in memory, finalize stays correct
                self.trace_failures += 1
                print(f"Warning: energy trace append failed for {device} at t={timestamp}: {e}", file=sys.stderr)

        self.latest_remaining[device] = remaining

        if self.verbose:
            print(f"[ENERGY_MONITOR] [{timestamp:.6f}s] [{device}] remaining={remaining:.6f} J")

        return True

    def reset(self):
        super().reset()
        self.latest_remaining = {}
        self.rejected = 0
        self.trace_failures = 0
