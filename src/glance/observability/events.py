"""Event model for preview observability.

Every event is a frozen dataclass stamped with a monotonic nanosecond
timestamp.  Pounce connection lifecycle events are stored alongside these
as-is (see ``PreviewCollector.record``).

Thread Safety:
    All events are frozen (immutable) and safe to share across threads.

"""

import time
from dataclasses import dataclass
from typing import Literal


@dataclass(frozen=True, slots=True)
class FileChanged:
    """A burst of writes in the template directory.

    Attributes:
        paths: Files written during the burst.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    paths: tuple[str, ...]
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class DataReplaced:
    """The render context was replaced through ``/data``.

    Attributes:
        keys: Top-level keys of the new context.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    keys: tuple[str, ...]
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class DataRejected:
    """A ``/data`` request was refused and the context left untouched."""

    reason: str
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class Broadcast:
    """A reload signal was fanned out.

    Attributes:
        trigger: What caused the broadcast.
        clients_notified: Subscribers that accepted the signal.
        clients_evicted: Subscribers dropped because they could not.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    trigger: Literal["file", "data"]
    clients_notified: int
    clients_evicted: int
    timestamp_ns: int


@dataclass(frozen=True, slots=True)
class RenderFailed:
    """The template set failed to parse or execute.

    Attributes:
        template: Entry template path.
        error_type: Exception class name.
        message: Exception message.
        timestamp_ns: Monotonic nanosecond timestamp.

    """

    template: str
    error_type: str
    message: str
    timestamp_ns: int


type PreviewEvent = FileChanged | DataReplaced | DataRejected | Broadcast | RenderFailed


def now_ns() -> int:
    """Return the current monotonic clock value in nanoseconds."""
    return time.monotonic_ns()
