import sys
from typing import Optional, TYPE_CHECKING

from simulator.engine.common.Monitor import Monitor
from telemetry.allow_list import AllowList
from telemetry.counters import ClassificationCounters
from telemetry.errors import MalformedEventError
from telemetry.events import Classification, PacketEvent

# Avoid circular import issues at type-checking time
if TYPE_CHECKING:
    from simulator.entities.common import Entity, EntitySignal


class AccessControlMonitor(Monitor):
    """
    Monitor that classifies every packet arrival against the allow-list.
    Has to be registered to the entity observing the receiver (the access point).
    Each classification is appended to self.log as a structured record.
    """

    signal_types = (PacketEvent,)

    def __init__(self, allow_list: AllowList, monitor_name: str = "acl", verbose=True):
        super().__init__(monitor_name=monitor_name, verbose=verbose)

        self.allow_list = allow_list
        self.counters = ClassificationCounters()

    def on_signal(self, entity: "Entity", signal: "EntitySignal"):
        self.classify(signal)

    def classify(self, event: PacketEvent) -> Optional[Classification]:
        """
        Classifies the packet and folds it into the counters.
        Returns None if the event is malformed (the event is rejected, counters untouched).
        """
        try:
            sender = event.validate()
        except MalformedEventError as e:
            self.counters.rejected += 1
            print(f"Warning: rejected packet event at t={event.timestamp}: {e}", file=sys.stderr)
            return None

        if self.allow_list.is_authorized(sender):
            result = Classification.AUTHORIZED
            self.counters.authorized += 1
        else:
            result = Classification.UNAUTHORIZED
            self.counters.unauthorized += 1
        self.counters.received += 1 # every classified packet counts as delivered

        record = event.get_log_data()
        record["classification"] = result.value
        self.log.append(record)

        if self.verbose:
            print(f"[{result}] Packet from {sender} size={int(event.size_bytes)} bytes")

        return result

    def reset(self):
        super().reset()
        self.counters.reset()
