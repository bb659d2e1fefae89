import math
import numbers
from enum import Enum
from typing import Any, Dict

from simulator.entities.common.entity_signal import EntitySignal
from telemetry.errors import MalformedEventError
from telemetry.identity import normalize_identity


class Classification(Enum):
    AUTHORIZED = "AUTHORIZED"
    UNAUTHORIZED = "UNAUTHORIZED"

    def __str__(self) -> str:
        return self.value


def _check_timestamp(timestamp: Any) -> float:
    if isinstance(timestamp, bool) or not isinstance(timestamp, numbers.Real):
        raise MalformedEventError(f"invalid timestamp: {timestamp!r}")
    if math.isnan(timestamp) or timestamp < 0:
        raise MalformedEventError(f"invalid timestamp: {timestamp!r}")
    return float(timestamp)


class PacketEvent(EntitySignal):
    """
    Packet arrival observed at the receiver's lower-layer boundary.
    """

    def __init__(self, sender_identity: Any, size_bytes: Any, timestamp: Any, descriptor: str = "packet arrival"):
        super().__init__(timestamp, "PACKET_RX", descriptor)
        self.sender_identity = sender_identity
        self.size_bytes = size_bytes

    def validate(self) -> str:
        """
        Checks the event fields, returns the canonical sender identity.
        Raises MalformedEventError if the event cannot be classified.
        """
        sender = normalize_identity(self.sender_identity)
        if isinstance(self.size_bytes, bool) or not isinstance(self.size_bytes, numbers.Integral):
            raise MalformedEventError(f"invalid packet size: {self.size_bytes!r}")
        if self.size_bytes < 0:
            raise MalformedEventError(f"negative packet size: {self.size_bytes}")
        _check_timestamp(self.timestamp)
        return sender

    def get_log_data(self) -> Dict[str, Any]:
        """row of a validated event: canonical sender, numeric fields as plain numbers"""
        data = super().get_log_data()
        data.update(
            {
                "time": float(self.timestamp),
                "sender": normalize_identity(self.sender_identity),
                "size_bytes": int(self.size_bytes),
            }
        )
        return data


class EnergySample(EntitySignal):
    """
    Remaining energy reported by a device energy source after a change.
    """

    def __init__(self, device_identity: Any, remaining_energy_joules: Any, timestamp: Any, descriptor: str = "energy level"):
        super().__init__(timestamp, "ENERGY", descriptor)
        self.device_identity = device_identity
        self.remaining_energy_joules = remaining_energy_joules

    def validate(self) -> str:
        """
        Checks the sample fields, returns the canonical device identity.
        Raises MalformedEventError if the sample cannot be recorded.
        """
        device = normalize_identity(self.device_identity)
        energy = self.remaining_energy_joules
        if isinstance(energy, bool) or not isinstance(energy, numbers.Real):
            raise MalformedEventError(f"invalid remaining energy: {energy!r}")
        if math.isnan(energy) or math.isinf(energy) or energy < 0:
            raise MalformedEventError(f"invalid remaining energy: {energy!r}")
        _check_timestamp(self.timestamp)
        return device

    def get_log_data(self) -> Dict[str, Any]:
        """row of a validated sample"""
        data = super().get_log_data()
        data.update(
            {
                "time": float(self.timestamp),
                "device": normalize_identity(self.device_identity),
                "remaining_J": float(self.remaining_energy_joules),
            }
        )
        return data
