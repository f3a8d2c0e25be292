"""File watcher — triggers a broadcast when the template directory changes.

Monitors the template's directory (non-recursively, since the template set is
exactly the files in that one directory).  watchfiles debounces raw OS events
into batches; each batch that contains at least one write is one burst and
produces exactly one ``on_change`` call.
"""

from __future__ import annotations

import sys
import threading
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from watchfiles import Change

from glance._errors import WatchError

if TYPE_CHECKING:
    from collections.abc import Callable, Iterable


@dataclass(frozen=True, slots=True)
class ChangeEvent:
    """One file in the template directory was created, modified or deleted."""

    path: Path
    kind: Literal["created", "modified", "deleted"]

    @property
    def is_write(self) -> bool:
        """Whether the change can alter rendered output."""
        return self.kind != "deleted" and not self.path.name.startswith(".")


_CHANGE_KIND_MAP: dict[Change, Literal["created", "modified", "deleted"]] = {
    Change.added: "created",
    Change.modified: "modified",
    Change.deleted: "deleted",
}

# Seconds to wait before re-establishing a watch that failed mid-flight.
_RETRY_DELAY = 1.0

# How long watchfiles blocks in one poll while idle (milliseconds).
_POLL_MS = 200

# How long start() waits for the first poll to come back (seconds).
_SETUP_TIMEOUT = 10.0


def to_events(raw_changes: Iterable[tuple[Change, str]]) -> tuple[ChangeEvent, ...]:
    """Convert one watchfiles batch to ChangeEvents, sorted by path."""
    events = {
        ChangeEvent(path=Path(path_str), kind=_CHANGE_KIND_MAP.get(change, "modified"))
        for change, path_str in raw_changes
    }
    return tuple(sorted(events, key=lambda e: (str(e.path), e.kind)))


class TemplateWatcher:
    """Watches a template directory and reports each burst of writes once.

    Runs watchfiles in a background thread.  ``on_change`` is invoked from
    that thread with the write events of the burst, so it must be
    thread-safe.

    Args:
        directory: Directory to watch.
        on_change: Called once per burst that contains a write.
        debounce_ms: watchfiles debounce window.

    """

    def __init__(
        self,
        directory: Path,
        on_change: Callable[[tuple[ChangeEvent, ...]], object],
        *,
        debounce_ms: int = 50,
    ) -> None:
        self._directory = directory
        self._on_change = on_change
        self._debounce_ms = debounce_ms
        self._stop_event = threading.Event()
        self._ready = threading.Event()
        self._setup_error: BaseException | None = None
        self._thread: threading.Thread | None = None

    @property
    def directory(self) -> Path:
        return self._directory

    @property
    def is_running(self) -> bool:
        """Whether the watcher background thread is active."""
        return self._thread is not None and self._thread.is_alive()

    def start(self) -> None:
        """Start watching in a background thread.

        Blocks until the OS watch is established, so setup failures surface
        here rather than in the thread.

        Raises:
            WatchError: If the directory cannot be watched.

        """
        if self.is_running:
            return
        if not self._directory.is_dir():
            msg = f"cannot watch {self._directory}: not a directory"
            raise WatchError(msg)

        self._stop_event.clear()
        self._ready.clear()
        self._setup_error = None
        self._thread = threading.Thread(
            target=self._watch_loop,
            name="glance-watcher",
            daemon=True,
        )
        self._thread.start()

        if not self._ready.wait(timeout=_SETUP_TIMEOUT):
            self.stop()
            msg = f"cannot watch {self._directory}: timed out establishing the watch"
            raise WatchError(msg)
        if self._setup_error is not None:
            exc = self._setup_error
            self.stop()
            msg = f"cannot watch {self._directory}: {exc}"
            raise WatchError(msg) from exc

    def stop(self) -> None:
        """Signal the watcher to stop and wait for the thread to finish."""
        self._stop_event.set()
        if self._thread is not None:
            self._thread.join(timeout=5.0)
            self._thread = None

    def handle_batch(self, raw_changes: Iterable[tuple[Change, str]]) -> bool:
        """Report one watchfiles batch.  Returns True if it triggered ``on_change``."""
        writes = tuple(e for e in to_events(raw_changes) if e.is_write)
        if not writes:
            return False
        self._on_change(writes)
        return True

    def _watch_loop(self) -> None:
        """Background thread: run watchfiles, restarting it after errors.

        watchfiles yields an empty batch every ``_POLL_MS`` while idle; the
        first batch of the first watch means the OS watch exists.  A failure
        before that is handed back to ``start``.
        """
        from watchfiles import watch

        while not self._stop_event.is_set():
            try:
                for raw_changes in watch(
                    self._directory,
                    stop_event=self._stop_event,
                    debounce=self._debounce_ms,
                    step=50,
                    rust_timeout=_POLL_MS,
                    yield_on_timeout=True,
                    recursive=False,
                ):
                    self._ready.set()
                    self.handle_batch(raw_changes)
            except Exception as exc:
                if not self._ready.is_set():
                    self._setup_error = exc
                    self._ready.set()
                    return
                print(
                    f"  Watch error: {self._directory}: {exc}",
                    file=sys.stderr,
                )
                self._stop_event.wait(_RETRY_DELAY)
