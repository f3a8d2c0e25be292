"""Content layer — the template set on disk and the watcher that follows it."""

from glance.content.template import TemplateRef
from glance.content.watcher import ChangeEvent, TemplateWatcher, to_events

__all__ = [
    "ChangeEvent",
    "TemplateRef",
    "TemplateWatcher",
    "to_events",
]
