"""Reactive layer — the live render context and change fan-out.

The DataStore holds the render context; the BroadcastRegistry tells every
connected browser to re-render when the context or a template file changes.
"""

from glance.reactive.broadcaster import (
    BroadcastRegistry,
    BroadcastResult,
    Subscriber,
    SubscriberState,
)
from glance.reactive.store import DataStore, RWLock, format_context, parse_context

__all__ = [
    "BroadcastRegistry",
    "BroadcastResult",
    "DataStore",
    "RWLock",
    "Subscriber",
    "SubscriberState",
    "format_context",
    "parse_context",
]
