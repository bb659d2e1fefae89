from typing import Any, Dict


class EntitySignal:
    """
    Something an event source reports to its monitors (a packet arrival, an energy level).
    `descriptor` is free text for console lines, the tabular data comes from get_log_data().
    """

    def __init__(self, timestamp: float, event_type: str, descriptor: str):
        self.timestamp = timestamp
        self.event_type = event_type
        self.descriptor = descriptor

    def get_log_data(self) -> Dict[str, Any]:
        """one DataFrame row; subclasses extend it with their own fields"""
        return {"time": self.timestamp, "event": self.event_type}

    def __repr__(self) -> str:
        return f"{type(self).__name__}(t={self.timestamp}, {self.event_type}, '{self.descriptor}')"
