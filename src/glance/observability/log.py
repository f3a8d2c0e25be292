"""Event log — bounded history of what the preview server did.

Holds file changes, data updates, broadcasts and render failures, plus
whatever Pounce hands the collector, in arrival order.

Thread Safety:
    Every method takes one ``threading.Lock``.  The watcher thread and the
    request handlers append concurrently.

"""

import threading
from collections import deque
from typing import Any


class EventLog:
    """Ring buffer of preview events with simple filtering.

    When full, the oldest event is dropped on each append.

    Args:
        max_events: Maximum number of events to retain.

    """

    __slots__ = ("_events", "_lock", "_max_events")

    def __init__(self, max_events: int = 1_000) -> None:
        self._max_events = max_events
        self._events: deque[Any] = deque(maxlen=max_events)
        self._lock = threading.Lock()

    def append(self, event: Any) -> None:
        with self._lock:
            self._events.append(event)

    def query(
        self,
        *,
        event_type: type | tuple[type, ...] | None = None,
        since_ns: int = 0,
        limit: int = 100,
    ) -> list[Any]:
        """Matching events, newest first.

        Args:
            event_type: Keep only instances of this type (or any of these).
            since_ns: Keep only events stamped at or after this time.
            limit: Stop after this many matches.

        """
        with self._lock:
            snapshot = list(self._events)

        matches: list[Any] = []
        for event in reversed(snapshot):
            if len(matches) >= limit:
                break
            if event_type is not None and not isinstance(event, event_type):
                continue
            if since_ns and getattr(event, "timestamp_ns", 0) < since_ns:
                continue
            matches.append(event)
        return matches

    def latest(self, event_type: type) -> Any | None:
        """The newest event of *event_type*, or None."""
        found = self.query(event_type=event_type, limit=1)
        return found[0] if found else None

    def recent(self, n: int = 20) -> list[Any]:
        """The last *n* events, oldest first."""
        with self._lock:
            return list(self._events)[-n:]

    def clear(self) -> int:
        """Drop every event; returns how many were dropped."""
        with self._lock:
            count = len(self._events)
            self._events.clear()
        return count

    def __len__(self) -> int:
        with self._lock:
            return len(self._events)

    def stats(self) -> dict[str, Any]:
        """Totals per event class name."""
        with self._lock:
            names = [type(event).__name__ for event in self._events]

        by_type: dict[str, int] = {}
        for name in names:
            by_type[name] = by_type.get(name, 0) + 1
        return {
            "total": len(names),
            "max_events": self._max_events,
            "by_type": by_type,
        }
