"""
Bounded, newest-first in-memory event log.
"""
import logging
import threading
from collections import deque
from itertools import islice
from typing import Deque, List

from ..models.schemas import Event

logger = logging.getLogger(__name__)

MAX_EVENTS = 1000


class EventLog:
    """
    Keeps the most recent ``capacity`` events, newest first.

    Appending at capacity evicts the oldest event. All operations hold a
    single lock, so readers never see a partially applied append.
    """

    def __init__(self, capacity: int = MAX_EVENTS):
        if capacity < 1:
            raise ValueError("capacity must be at least 1")
        self._capacity = capacity
        # Index 0 is the newest event
        self._events: Deque[Event] = deque(maxlen=capacity)
        self._lock = threading.Lock()

    @property
    def capacity(self) -> int:
        return self._capacity

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def append(self, event: Event) -> Event:
        """
        Record an event at the newest position.

        Returns the event as stored. Its timestamp is raised to the newest
        retained timestamp if the clock stepped backwards.
        """
        with self._lock:
            if self._events and event.timestamp < self._events[0].timestamp:
                event = event.model_copy(update={"timestamp": self._events[0].timestamp})
            if len(self._events) == self._capacity:
                logger.debug("Event log at capacity, evicting oldest event")
            self._events.appendleft(event)
        return event

    def recent(self, limit: int) -> List[Event]:
        """Return up to ``limit`` events, newest first."""
        limit = max(0, min(limit, self._capacity))
        with self._lock:
            return list(islice(self._events, limit))

    def clear(self) -> None:
        with self._lock:
            self._events.clear()
