"""Preview routes — the HTTP endpoints, wired onto a Chirp app.

``/``               the patched preview document (any other path is a plain 404)
``/sse``            one event per change, each carrying the full unpatched document
``/data``           POST a JSON object to replace the render context
``/__glance/stats`` event log summary as JSON

The handlers own no state of their own.  The renderer, store and registry
are handed in at wiring time.  Renders run in a worker thread; they read the
whole template directory from disk.
"""

from __future__ import annotations

import asyncio
import json
import sys
from dataclasses import asdict, is_dataclass
from typing import TYPE_CHECKING, Any

from glance._errors import DataError
from glance.render.patch import DATA_PATH, SSE_PATH

if TYPE_CHECKING:
    from collections.abc import AsyncIterator

    from chirp import App, Request
    from chirp.http.response import Response

    from glance.observability.collector import PreviewCollector
    from glance.reactive.broadcaster import BroadcastRegistry, Subscriber
    from glance.reactive.store import DataStore
    from glance.render.renderer import Renderer


INDEX_PATH = "/"
STATS_PATH = "/__glance/stats"

# Previews may be embedded in, or fed from, pages on other origins.
ALLOW_ORIGIN = "*"

# EventSource reconnect delay sent with the last event of an evicted stream.
RECONNECT_MS = 250

_HTML = "text/html; charset=utf-8"
_TEXT = "text/plain; charset=utf-8"

# Methods routed to /data so the handler can answer 405 itself.
_DATA_METHODS = ["GET", "HEAD", "POST", "PUT", "PATCH", "DELETE"]


class PreviewRoutes:
    """HTTP front end of the preview server.

    Args:
        renderer: Produces preview documents.
        store: Live render context, replaced through ``/data``.
        registry: Fan-out registry the event streams subscribe to.
        collector: Optional sink for rejected data updates; also backs the
            stats endpoint.

    """

    def __init__(
        self,
        renderer: Renderer,
        store: DataStore,
        registry: BroadcastRegistry,
        collector: PreviewCollector | None = None,
    ) -> None:
        self._renderer = renderer
        self._store = store
        self._registry = registry
        self._collector = collector

    def register(self, app: App) -> None:
        """Register the endpoints and the CORS middleware on *app*.

        Must be called before the Chirp app is frozen (before first request).
        """
        from chirp.middleware import CORSConfig, CORSMiddleware

        async def index(request: Request) -> Any:
            return await self.handle_index(request)

        async def events(request: Request) -> Any:
            return await self.handle_events(request)

        async def data(request: Request) -> Any:
            return await self.handle_data(request)

        async def stats(request: Request) -> Any:
            return await self.handle_stats(request)

        index.__name__ = "glance_index"
        events.__name__ = "glance_events"
        data.__name__ = "glance_data"
        stats.__name__ = "glance_stats"

        app.route(INDEX_PATH, name="glance:index")(index)
        app.route(SSE_PATH, name="glance:events")(events)
        app.route(DATA_PATH, methods=_DATA_METHODS, name="glance:data")(data)
        app.route(STATS_PATH, name="glance:stats")(stats)

        # The event stream sets its own CORS header; Chirp's SSE handler
        # ignores middleware headers.
        app.add_middleware(
            CORSMiddleware(
                CORSConfig(
                    allow_origins=(ALLOW_ORIGIN,),
                    allow_methods=("GET", "HEAD", "POST", "OPTIONS"),
                    allow_headers=("Content-Type",),
                )
            )
        )

    # ----- handlers -----

    async def handle_index(self, request: Request) -> Response:
        """Serve the patched preview document."""
        from chirp.http.response import Response

        body = await asyncio.to_thread(self._renderer.render, patch=True)
        return Response(
            body=body.decode("utf-8", errors="replace"),
            status=200,
            content_type=_HTML,
        )

    async def handle_data(self, request: Request) -> Response:
        """Replace the render context with the JSON object in the request body.

        405 for anything but POST; 500 when the body cannot be read or is not
        a JSON object, in which case the context is left untouched and
        nothing is broadcast.
        """
        from chirp.http.response import Response

        if request.method != "POST":
            return Response(body="", status=405, content_type=_TEXT)

        try:
            raw = await request.body()
        except Exception as exc:
            print(f"  Could not read body: {exc}", file=sys.stderr)
            self._reject(f"unreadable body: {exc}")
            return Response(body="could not read body", status=500, content_type=_TEXT)

        try:
            self._store.replace(raw)
        except DataError as exc:
            print(f"  Bad data: {exc}", file=sys.stderr)
            self._reject(str(exc))
            return Response(body=str(exc), status=500, content_type=_TEXT)

        return Response(body="", status=200, content_type=_TEXT)

    async def handle_events(self, request: Request) -> Any:
        """Open an event stream for one client.

        A reconnecting EventSource sends back the id of the last event it
        saw; the stream uses it to catch up on changes made while the client
        was away.
        """
        from chirp import EventStream

        subscriber = self._registry.register()
        last_event_id = request.headers.get("last-event-id")
        return EventStream(
            self.stream(subscriber, last_event_id=last_event_id),
            allow_origin=ALLOW_ORIGIN,
        )

    async def handle_stats(self, request: Request) -> Response:
        """Summarize the event log as JSON."""
        from chirp.http.response import Response

        payload: dict[str, Any] = {"subscribers": self._registry.subscriber_count}
        if self._collector is not None:
            log = self._collector.log
            payload["event_log"] = log.stats()
            payload["recent"] = [_describe(event) for event in log.recent(20)]
        return Response(
            body=json.dumps(payload, indent=2, default=str),
            status=200,
            content_type="application/json",
        )

    async def stream(
        self, subscriber: Subscriber, *, last_event_id: str | None = None
    ) -> AsyncIterator[Any]:
        """Yield one full-document event per drained signal.

        Every event is stamped with the registry generation it was rendered
        at.  A reconnect whose *last_event_id* is behind the current
        generation gets the current document straight away.

        When the subscriber is evicted the stream sends the current document
        once more, with a short reconnect delay, and ends.  Client disconnect
        cancels the generator.  The subscriber is closed on the way out and
        the next broadcast prunes it.
        """
        try:
            if last_event_id is not None and last_event_id != str(self._registry.generation):
                yield await self.render_event()
            while True:
                delivered = await subscriber.wait()
                if not delivered:
                    yield await self.render_event(retry=RECONNECT_MS)
                    return
                yield await self.render_event()
        except (asyncio.CancelledError, GeneratorExit):
            return
        finally:
            subscriber.close()

    async def render_event(self, *, retry: int | None = None) -> Any:
        """The unpatched document as one event (one ``data:`` line per line)."""
        from chirp import SSEEvent

        generation = self._registry.generation
        body = await asyncio.to_thread(self._renderer.render, patch=False)
        return SSEEvent(
            data=body.decode("utf-8", errors="replace"),
            id=str(generation),
            retry=retry,
        )

    def _reject(self, reason: str) -> None:
        if self._collector is not None:
            self._collector.record_data_rejected(reason)


def _describe(event: Any) -> dict[str, Any]:
    fields = asdict(event) if is_dataclass(event) and not isinstance(event, type) else {}
    return {"type": type(event).__name__, **fields}
