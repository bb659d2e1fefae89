from typing import Optional, Any
from collections.abc import Callable

from simulator.engine.config import DEFAULT_EVENT_PRIORITY

'''
This class implements the base Event class for the replay engine.
It provides an interface for the scheduler.
Concrete sources create events carrying the callback that delivers
their signal to the attached monitors.
'''
class Event:
    def __init__(self, time: float, string_id: str = None, priority: int = DEFAULT_EVENT_PRIORITY, blame: Optional[Any] = None, callback: Callable = None, **kwargs):
        self._unique_id = None # unique id assigned by the scheduler
        self._cancelled = False
        self.time = time  # The time at which the event occurs (seconds)
        self.string_id = string_id  # A string identifier for the event
        self.priority = priority  # Priority of the event, lower values are processed first
        self.blame = blame  # blame source, if any
        self.callback = callback  # Callback for the event
        self.kwargs = kwargs

    def __str__(self) -> str:
        return f"Event(id={self._unique_id}, string_id='{self.string_id}', time={self.time}, blame={self.blame})"

    def run(self):
        if self.callback is not None:
            self.callback(**self.kwargs)

    def __lt__(self, other: "Event") -> bool:
        '''
        Overloads the < operator to compare events
        '''
        if not isinstance(other, Event):
            return NotImplemented

        # Compare event times first
        if self.time != other.time:
            return self.time < other.time

        # Compare event priorities if times are equal
        if self.priority != other.priority:
            return self.priority < other.priority

        # same time and priority: scheduling order wins (last scheduled runs last)
        return self._unique_id < other._unique_id
