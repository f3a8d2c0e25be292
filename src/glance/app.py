"""Glance application — wires the preview services onto a Chirp app.

Each service is constructed once per server and handed to whatever needs it;
there are no module-level globals.  ``preview()`` is the public entry point.
"""

from __future__ import annotations

import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING, Literal

from glance.config_loader import load_config
from glance.content.template import TemplateRef
from glance.content.watcher import TemplateWatcher
from glance.observability import EventLog, PreviewCollector
from glance.reactive.broadcaster import BroadcastRegistry, BroadcastResult
from glance.reactive.store import DataStore
from glance.render.renderer import Renderer
from glance.routes import PreviewRoutes

if TYPE_CHECKING:
    from chirp import App

    from glance.config import PreviewConfig
    from glance.content.watcher import ChangeEvent


class Preview:
    """The single-instance services behind one preview server.

    Builds the data store, broadcast registry, renderer, watcher and routes
    for *config* and connects them: data updates and file changes both end
    in ``reload``.

    Args:
        config: Resolved configuration.

    Raises:
        ConfigError: If the initial data cannot be loaded.

    """

    def __init__(self, config: PreviewConfig) -> None:
        self.config = config
        self.collector = PreviewCollector(EventLog())
        self.template = TemplateRef(config.template)
        self.store = DataStore.from_initial(config.data, listener=self.on_data_replaced)
        self.registry = BroadcastRegistry()
        self.renderer = Renderer(
            self.template, self.store, editor=config.editor, collector=self.collector
        )
        self.routes = PreviewRoutes(
            self.renderer, self.store, self.registry, collector=self.collector
        )
        self.watcher = TemplateWatcher(
            self.template.directory,
            self.on_files_changed,
            debounce_ms=config.debounce_ms,
        )

    def reload(self, trigger: Literal["file", "data"]) -> BroadcastResult:
        """Tell every connected browser to re-render."""
        result = self.registry.broadcast()
        self.collector.record_broadcast(trigger, result.notified, result.evicted)
        return result

    def on_data_replaced(self) -> None:
        self.collector.record_data(self.store.keys())
        self.reload("data")

    def on_files_changed(self, events: tuple[ChangeEvent, ...]) -> None:
        names = ", ".join(e.path.name for e in events)
        print(f"  File changed: {names}", file=sys.stderr)
        self.collector.record_file_change(str(e.path) for e in events)
        self.reload("file")


def create_app(preview: Preview) -> App:
    """Create the Chirp app serving *preview*.

    The watcher is started here, before the server binds, so a directory that
    cannot be watched stops startup with a ``WatchError``.  It is stopped by
    the app's shutdown hook.
    """
    from chirp import App, AppConfig

    preview.watcher.start()

    config = preview.config
    app = App(
        config=AppConfig(
            template_dir=config.template_dir,
            debug=False,
            host=config.host,
            port=config.port,
        )
    )
    preview.routes.register(app)

    @app.on_shutdown
    async def _stop_watcher() -> None:
        preview.watcher.stop()

    return app


# ---------------------------------------------------------------------------
# Public entry point
# ---------------------------------------------------------------------------


def preview(template: str | Path = "template.html", **kwargs: object) -> None:
    """Serve a live preview of *template*.

    Args:
        template: Path to the primary template.  Every file in its directory
            is part of the template set.
        **kwargs: Override PreviewConfig fields (``addr`` is accepted as
            ``host:port``).

    Raises:
        ConfigError: Bad configuration or initial data.
        WatchError: The template directory cannot be watched.

    """
    from glance.banner import print_banner

    config = load_config(Path(template), **kwargs)
    t0 = time.perf_counter()

    state = Preview(config)
    app = create_app(state)

    load_ms = (time.perf_counter() - t0) * 1000
    print_banner(config, source_count=len(state.template.sources()), load_ms=load_ms)

    app.run(host=config.host, port=config.port, lifecycle_collector=state.collector)
