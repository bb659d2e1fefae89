from typing import List, TYPE_CHECKING

from simulator.entities.common.entity_signal import EntitySignal

if TYPE_CHECKING:
    from simulator.engine.common.Monitor import Monitor


class Entity:
    """
    Observable event source. Monitors attached to it receive every signal
    it emits, in attachment order.
    """

    def __init__(self):
        self._monitors: List["Monitor"] = []

    @property
    def monitors(self) -> List["Monitor"]:
        return list(self._monitors)

    def attach_monitor(self, monitor: "Monitor"):
        if monitor not in self._monitors:
            self._monitors.append(monitor)

    def detach_monitor(self, monitor: "Monitor"):
        if monitor in self._monitors:
            self._monitors.remove(monitor)

    def _notify_monitors(self, signal: EntitySignal):
        # iterate on a copy: a monitor may detach itself while handling the signal
        for monitor in list(self._monitors):
            monitor.update(entity=self, signal=signal)
