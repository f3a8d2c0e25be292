"""Preview collector — one sink for server and preview events.

Implements Pounce's ``LifecycleCollector`` protocol (duck-typed ``record``)
so it can be handed to ``App.run`` and connection events land in the same
EventLog as file, data, broadcast and render events.

Thread Safety:
    Delegates to ``EventLog``, which is internally locked.

"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any, Literal

from glance.observability.events import (
    Broadcast,
    DataRejected,
    DataReplaced,
    FileChanged,
    RenderFailed,
    now_ns,
)
from glance.observability.log import EventLog

if TYPE_CHECKING:
    from collections.abc import Iterable


class PreviewCollector:
    """Records preview events into an EventLog.

    Args:
        log: The EventLog to store events in.

    """

    __slots__ = ("_log",)

    def __init__(self, log: EventLog | None = None) -> None:
        self._log = log if log is not None else EventLog()

    @property
    def log(self) -> EventLog:
        """The underlying event log."""
        return self._log

    def record(self, event: Any) -> None:
        """Record a Pounce lifecycle event as-is."""
        self._log.append(event)

    def record_file_change(self, paths: Iterable[str]) -> None:
        self._log.append(FileChanged(paths=tuple(paths), timestamp_ns=now_ns()))

    def record_data(self, keys: Iterable[str]) -> None:
        self._log.append(DataReplaced(keys=tuple(keys), timestamp_ns=now_ns()))

    def record_data_rejected(self, reason: str) -> None:
        self._log.append(DataRejected(reason=reason, timestamp_ns=now_ns()))

    def record_broadcast(
        self,
        trigger: Literal["file", "data"],
        clients_notified: int,
        clients_evicted: int,
    ) -> None:
        self._log.append(
            Broadcast(
                trigger=trigger,
                clients_notified=clients_notified,
                clients_evicted=clients_evicted,
                timestamp_ns=now_ns(),
            )
        )

    def record_render_failure(self, template: str, exc: BaseException) -> None:
        self._log.append(
            RenderFailed(
                template=template,
                error_type=type(exc).__qualname__,
                message=str(exc),
                timestamp_ns=now_ns(),
            )
        )
