"""In-memory buffered event sink."""

from collections import deque
from typing import Optional

from .base import BaseEventSink, Event, LogEvent, StatusSnapshot

DEFAULT_MAX_EVENTS = 1000


class BufferedEventSink(BaseEventSink):
    """Keeps the most recent events in a bounded buffer for a display to drain."""

    def __init__(self, name: str = "buffer", max_events: int = DEFAULT_MAX_EVENTS):
        super().__init__(name, config={"max_events": max_events})
        self.events: deque[Event] = deque(maxlen=max_events)

    def publish(self, event: Event) -> None:
        self.events.append(event)

    def health_check(self) -> bool:
        return True

    def drain(self) -> list[Event]:
        """Return and clear all buffered events."""
        drained = list(self.events)
        self.events.clear()
        return drained

    @property
    def log_events(self) -> list[LogEvent]:
        return [e for e in self.events if isinstance(e, LogEvent)]

    @property
    def status_snapshots(self) -> list[StatusSnapshot]:
        return [e for e in self.events if isinstance(e, StatusSnapshot)]

    @property
    def latest_status(self) -> Optional[StatusSnapshot]:
        snapshots = self.status_snapshots
        return snapshots[-1] if snapshots else None
