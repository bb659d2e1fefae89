import math
from dataclasses import dataclass, field
from typing import Any, Dict, Mapping

import pandas as pd

from telemetry.counters import ClassificationCounters
from telemetry.identity import normalize_identity


@dataclass(frozen=True)
class RunSummary:
    """
    Final metrics of one run, computed once by TelemetryAggregator.

    Attributes:
        total_packets_sent: intended packet count supplied by the driver (an estimate, not observed)
        total_packets_received: packets classified during the run
        delivery_ratio_percent: received / sent * 100, 0 when nothing was intended
        per_device_energy_consumed: canonical device identity -> consumed energy (J)
        average_energy_consumed_joules: mean of per_device_energy_consumed, 0 without devices
        total_energy_consumed_joules: sum of per_device_energy_consumed
        authorized_count, unauthorized_count, rejected_count: access-control accounting
    """
    total_packets_sent: int
    total_packets_received: int
    delivery_ratio_percent: float
    per_device_energy_consumed: Dict[str, float] = field(default_factory=dict)
    average_energy_consumed_joules: float = 0.0
    total_energy_consumed_joules: float = 0.0
    authorized_count: int = 0
    unauthorized_count: int = 0
    rejected_count: int = 0

    def energy_consumed_by(self, device: Any) -> float:
        return self.per_device_energy_consumed[normalize_identity(device)]

    def to_dict(self) -> Dict[str, Any]:
        return {
            "authorized_count": self.authorized_count,
            "unauthorized_count": self.unauthorized_count,
            "rejected_count": self.rejected_count,
            "total_packets_sent": self.total_packets_sent,
            "total_packets_received": self.total_packets_received,
            "delivery_ratio_percent": self.delivery_ratio_percent,
            "per_device_energy_consumed": dict(self.per_device_energy_consumed),
            "average_energy_consumed_joules": self.average_energy_consumed_joules,
            "total_energy_consumed_joules": self.total_energy_consumed_joules,
        }

    def energy_dataframe(self) -> pd.DataFrame:
        """per-device consumption, one row per device"""
        return pd.DataFrame(
            {
                "device": list(self.per_device_energy_consumed.keys()),
                "consumed_J": list(self.per_device_energy_consumed.values()),
            }
        )


class TelemetryAggregator:
    """
    One-shot reducer over the state accumulated during a run.
    """

    @staticmethod
    def delivery_ratio(received: int, intended_sent_count: int) -> float:
        if intended_sent_count <= 0:
            return 0.0 # no packets intended: defined as 0, no division
        return (received / intended_sent_count) * 100.0

    @staticmethod
    def finalize(
        counters: ClassificationCounters,
        latest_remaining: Mapping[str, float],
        initial_energy_per_device: Mapping[Any, float],
        intended_sent_count: int,
    ) -> RunSummary:
        if intended_sent_count < 0:
            raise ValueError(f"intended_sent_count must be non-negative, got {intended_sent_count}")

        consumed: Dict[str, float] = {}
        for device, initial in initial_energy_per_device.items():
            if math.isnan(initial) or math.isinf(initial) or initial < 0:
                raise ValueError(f"initial energy of {device} must be a finite non-negative number, got {initial}")
            key = normalize_identity(device)
            if key in consumed:
                raise ValueError(f"device {device!r} listed twice (canonical identity {key})")
            initial = float(initial)
            # a device that never reported did not go below its initial energy
            consumed[key] = initial - latest_remaining.get(key, initial)

        total = sum(consumed.values())
        average = total / len(consumed) if consumed else 0.0

        return RunSummary(
            total_packets_sent=int(intended_sent_count),
            total_packets_received=counters.received,
            delivery_ratio_percent=TelemetryAggregator.delivery_ratio(counters.received, intended_sent_count),
            per_device_energy_consumed=consumed,
            average_energy_consumed_joules=average,
            total_energy_consumed_joules=total,
            authorized_count=counters.authorized,
            unauthorized_count=counters.unauthorized,
            rejected_count=counters.rejected,
        )
