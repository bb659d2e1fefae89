import heapq
from typing import Optional

from simulator.engine.config import SCHEDULER_TIME_SCALE
from simulator.engine.common.Event import Event


class Scheduler:
    """
    Manages the event queue of the replay engine.
    The public API works in seconds, while integer ticks of SCHEDULER_TIME_SCALE are used for ordering.
    """

    def __init__(self):
        self.event_queue = []
        self._current_tick = 0
        self._current_time = 0.0  # time in seconds of the last executed event
        self.last_event_id = 0
        self._time_scale = SCHEDULER_TIME_SCALE

    def _to_ticks(self, time_s: float) -> int:
        return int(round(time_s / self._time_scale))

    def schedule(self, event: Event) -> None:
        """Schedules an event. The event's time is expected in seconds."""
        self.last_event_id += 1
        event._unique_id = self.last_event_id

        event_tick = self._to_ticks(event.time)

        if event_tick < self._current_tick:
            raise ValueError(
                f"Cannot schedule event in the past: event_time={event.time}s < current_time={self.now()}s"
            )

        # the tick orders the heap, ties are solved by Event.__lt__ (priority, then scheduling order)
        heapq.heappush(self.event_queue, (event_tick, event))

    def unschedule(self, event: Event) -> bool:
        """Marks an event as cancelled so it will not be executed."""
        event._cancelled = True
        return True

    def peek_time(self) -> Optional[float]:
        """Time in seconds of the next pending event, None if the queue is empty."""
        while self.event_queue and self.event_queue[0][1]._cancelled:
            heapq.heappop(self.event_queue)
        if not self.event_queue:
            return None
        return self.event_queue[0][1].time

    def run_next_event(self) -> None:
        """Pops the next event, updates simulation time, and runs it."""
        if self.event_queue:
            tick, event = heapq.heappop(self.event_queue)

            if not event._cancelled:
                self._current_tick = tick
                self._current_time = event.time
                event.run()

    def run(self, until: Optional[float] = None) -> int:
        """
        Runs events in time order. Events at or after `until` (seconds) are left in the queue,
        as the external simulator stops the clock at the end of the run window.
        Returns the number of executed events.
        """
        executed = 0
        while True:
            next_time = self.peek_time()
            if next_time is None:
                break
            if until is not None and self._to_ticks(next_time) >= self._to_ticks(until):
                break
            self.run_next_event()
            executed += 1

        if until is not None and self._to_ticks(until) > self._current_tick:
            self._current_tick = self._to_ticks(until)
            self._current_time = until
        return executed

    def now(self) -> float:
        """Returns the current simulation time in SECONDS."""
        return self._current_time

    def is_empty(self) -> bool:
        return self.peek_time() is None

    def get_queue_length(self) -> int:
        return len(self.event_queue)

    def flush(self) -> None:
        """Resets the scheduler to its initial state."""
        self.event_queue = []
        self._current_tick = 0
        self._current_time = 0.0
        self.last_event_id = 0
