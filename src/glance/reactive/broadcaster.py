"""SSE broadcaster — fans "something changed" signals out to connected browsers.

Each open ``/sse`` stream owns one Subscriber: a single-slot notification
channel.  ``broadcast`` offers a signal to every subscriber without blocking;
a subscriber that already holds an undrained signal, or has been closed
because its client went away, is evicted in the same pass.  There is no
separate reaper and no explicit unsubscribe.

The signal carries no payload.  A stream that drains it re-renders the
current state, so several triggers landing before a drain coalesce into one
render.
"""

from __future__ import annotations

import asyncio
import enum
import threading
from dataclasses import dataclass
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from collections.abc import Iterator


class SubscriberState(enum.Enum):
    """Lifecycle of a Subscriber."""

    REGISTERED = "registered"
    DELIVERED = "delivered"
    EVICTED = "evicted"


class Subscriber:
    """One client's notification channel.

    ``offer`` may be called from any thread; ``wait`` must be awaited on the
    event loop the subscriber was created for.

    Args:
        loop: Event loop of the stream that owns this subscriber.

    """

    __slots__ = ("_loop", "_lock", "_state", "_wakeup")

    def __init__(self, loop: asyncio.AbstractEventLoop) -> None:
        self._loop = loop
        self._lock = threading.Lock()
        self._state = SubscriberState.REGISTERED
        self._wakeup = asyncio.Event()

    @property
    def state(self) -> SubscriberState:
        with self._lock:
            return self._state

    @property
    def closed(self) -> bool:
        return self.state is SubscriberState.EVICTED

    @property
    def pending(self) -> bool:
        """True while a delivered signal has not been drained yet."""
        return self.state is SubscriberState.DELIVERED

    def offer(self) -> bool:
        """Try to deliver a signal without blocking.

        Returns False if a signal is already pending or the subscriber is
        closed; the caller treats that as a dead channel.

        """
        with self._lock:
            if self._state is not SubscriberState.REGISTERED:
                return False
            self._state = SubscriberState.DELIVERED
        self._wake()
        return True

    def close(self) -> None:
        """Mark the subscriber evicted and wake its stream.

        An undrained signal is dropped; ``wait`` returns False from now on.
        """
        with self._lock:
            if self._state is SubscriberState.EVICTED:
                return
            self._state = SubscriberState.EVICTED
        self._wake()

    async def wait(self) -> bool:
        """Wait for the next signal.

        Returns True when a signal was drained, False once the subscriber
        has been closed.

        """
        while True:
            with self._lock:
                if self._state is SubscriberState.DELIVERED:
                    self._state = SubscriberState.REGISTERED
                    return True
                if self._state is SubscriberState.EVICTED:
                    return False
                self._wakeup.clear()
            await self._wakeup.wait()

    def _wake(self) -> None:
        if self._loop.is_closed():
            return
        try:
            running = asyncio.get_running_loop()
        except RuntimeError:
            running = None
        if running is self._loop:
            self._wakeup.set()
        else:
            self._loop.call_soon_threadsafe(self._wakeup.set)


@dataclass(frozen=True, slots=True)
class BroadcastResult:
    """Outcome of one ``broadcast`` pass.

    Attributes:
        notified: Subscribers that accepted the signal.
        evicted: Subscribers removed because they could not.

    """

    notified: int
    evicted: int


class BroadcastRegistry:
    """Registry of live Subscribers with best-effort, prune-on-failure fan-out.

    Thread-safe: the subscriber list is guarded by a lock.  ``broadcast`` is
    called both from request handlers (data updates) and from the watcher
    thread (file changes).

    """

    def __init__(self) -> None:
        self._subscribers: list[Subscriber] = []
        self._lock = threading.Lock()
        self._generation = 0

    @property
    def generation(self) -> int:
        """Number of broadcasts so far; stamps the events streams send."""
        with self._lock:
            return self._generation

    @property
    def subscriber_count(self) -> int:
        """Number of registered subscribers."""
        with self._lock:
            return len(self._subscribers)

    def __iter__(self) -> Iterator[Subscriber]:
        with self._lock:
            return iter(list(self._subscribers))

    def register(self, loop: asyncio.AbstractEventLoop | None = None) -> Subscriber:
        """Create and register a Subscriber bound to *loop*.

        Defaults to the running loop, so call from inside the stream handler.
        """
        subscriber = Subscriber(loop or asyncio.get_running_loop())
        with self._lock:
            self._subscribers.append(subscriber)
        return subscriber

    def broadcast(self) -> BroadcastResult:
        """Signal every subscriber; evict the ones that cannot take a signal.

        Walks the list from the end so removal during iteration is safe.

        """
        notified = 0
        evicted = 0
        with self._lock:
            self._generation += 1
            for i in range(len(self._subscribers) - 1, -1, -1):
                subscriber = self._subscribers[i]
                if subscriber.offer():
                    notified += 1
                    continue
                subscriber.close()
                del self._subscribers[i]
                evicted += 1
        return BroadcastResult(notified=notified, evicted=evicted)
