import math
from pathlib import Path
from typing import Any, Optional, Union

import pandas as pd

from simulator.engine.Scheduler import Scheduler
from simulator.engine.common.Event import Event
from simulator.entities.common import Entity, EntitySignal
from telemetry.events import EnergySample, PacketEvent

TRACE_COLUMNS = ["time", "kind", "identity", "value"]
PACKET_KIND = "packet"
ENERGY_KIND = "energy"


class ReplaySource(Entity):
    """
    Event source that re-emits a recorded event trace at its original timestamps.
    It stands in for the network simulator: packet arrivals observed at the access point
    and energy-level changes of the devices are delivered to the attached monitors.

    Trace layout (CSV with header): time,kind,identity,value
    kind is 'packet' (value = size in bytes) or 'energy' (value = remaining joules).
    """

    def __init__(self, scheduler: Scheduler, name: str = "replay"):
        super().__init__()
        self.scheduler = scheduler
        self.name = name
        self.scheduled_events = 0

    @staticmethod
    def read_trace(path: Union[str, Path]) -> pd.DataFrame:
        df = pd.read_csv(path, dtype={"kind": str, "identity": str})
        missing = [c for c in TRACE_COLUMNS if c not in df.columns]
        if missing:
            raise ValueError(f"event trace {path} is missing columns: {missing}")
        return df

    def load(self, trace: Union[str, Path, pd.DataFrame]) -> int:
        """
        Schedules every row of the trace. Rows keep their file order when timestamps are equal.
        Returns the number of scheduled events.
        """
        df = trace if isinstance(trace, pd.DataFrame) else self.read_trace(trace)

        count = 0
        for row in df.itertuples(index=False):
            kind = str(row.kind).strip().lower()
            timestamp = _to_number(row.time)
            signal = self._build_signal(kind, row.identity, row.value, timestamp)
            if signal is None:
                raise ValueError(f"unknown event kind '{row.kind}' at t={row.time}")

            # a missing, non-numeric or past timestamp is delivered now and rejected by the monitors
            now = self.scheduler.now()
            if isinstance(timestamp, float) and not math.isnan(timestamp):
                event_time = max(timestamp, now)
            else:
                event_time = now

            event = Event(
                time=event_time,
                string_id=f"{self.name}:{kind}",
                blame=self,
                callback=self._emit,
                signal=signal,
            )
            self.scheduler.schedule(event)
            count += 1

        self.scheduled_events += count
        return count

    def _build_signal(self, kind: str, identity: Any, value: Any, timestamp: Any) -> Optional[EntitySignal]:
        identity = None if _is_missing(identity) else identity
        # malformed values are forwarded as they are, the monitors reject them
        number = _to_number(value)

        if kind == PACKET_KIND:
            if isinstance(number, float) and number.is_integer():
                number = int(number)
            return PacketEvent(identity, number, timestamp, descriptor=f"{self.name} packet")

        if kind == ENERGY_KIND:
            return EnergySample(identity, number, timestamp, descriptor=f"{self.name} energy")

        return None

    def _emit(self, signal: EntitySignal):
        self._notify_monitors(signal)


def _to_number(value: Any) -> Any:
    if _is_missing(value):
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        return value


def _is_missing(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, float) and math.isnan(value):
        return True
    return isinstance(value, str) and not value.strip()
