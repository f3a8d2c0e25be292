"""Preview observability — file, data, broadcast and render events.

Quick Start:
    >>> from glance.observability import EventLog, PreviewCollector
    >>> collector = PreviewCollector(EventLog())
    >>> # Pass collector to App.run() as lifecycle_collector

"""

from glance.observability.collector import PreviewCollector
from glance.observability.events import (
    Broadcast,
    DataRejected,
    DataReplaced,
    FileChanged,
    PreviewEvent,
    RenderFailed,
    now_ns,
)
from glance.observability.log import EventLog

__all__ = [
    "Broadcast",
    "DataRejected",
    "DataReplaced",
    "EventLog",
    "FileChanged",
    "PreviewCollector",
    "PreviewEvent",
    "RenderFailed",
    "now_ns",
]
