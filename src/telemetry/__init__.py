"""
Access-control and telemetry aggregation engine.

Consumes packet arrivals and energy samples delivered by a network simulation,
classifies senders against an address allow-list, records the energy trace and
reduces everything to a RunSummary at the end of the run.
"""

__version__ = "0.1.0"

from .allow_list import AllowList
from .aggregator import RunSummary, TelemetryAggregator
from .counters import ClassificationCounters
from .errors import (
    TelemetryError,
    MalformedEventError,
    DoubleFinalizeError,
    RunStateError,
)
from .events import Classification, PacketEvent, EnergySample
from .identity import normalize_identity
from .monitors import AccessControlMonitor, EnergyMonitor
from .run import RunTelemetry
from .trace_writer import EnergyTraceWriter, read_energy_trace

__all__ = [
    "AllowList",
    "RunSummary",
    "TelemetryAggregator",
    "ClassificationCounters",
    "TelemetryError",
    "MalformedEventError",
    "DoubleFinalizeError",
    "RunStateError",
    "Classification",
    "PacketEvent",
    "EnergySample",
    "normalize_identity",
    "AccessControlMonitor",
    "EnergyMonitor",
    "RunTelemetry",
    "EnergyTraceWriter",
    "read_energy_trace",
]
