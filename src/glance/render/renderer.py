"""Renderer — template set + render context -> document bytes.

Every call builds a fresh Kida environment over the template directory and
parses every file in it, so an edit to any partial is picked up on the next
render without a restart.  Nothing is cached across renders; a preview tool
trades speed for freshness.

``render`` never raises.  Parse and execution failures become the error
document from ``glance.render.error_page``.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from glance._errors import RenderError
from glance.reactive.store import format_context
from glance.render.error_page import render_error_page
from glance.render.patch import patch as patch_document

if TYPE_CHECKING:
    from kida import Environment

    from glance.content.template import TemplateRef
    from glance.observability.collector import PreviewCollector
    from glance.reactive.store import DataStore


def load_environment(template: TemplateRef) -> Environment:
    """Create a Kida environment over *template*'s directory and parse every file.

    Raises:
        RenderError: If the directory or the entry template is missing.

    Anything Kida raises for a malformed template propagates unchanged.
    """
    from kida import Environment, FileSystemLoader

    if not template.directory.is_dir():
        msg = f"template directory not found: {template.directory}"
        raise RenderError(msg)
    sources = template.sources()
    if template.name not in sources:
        msg = f"template not found: {template.path}"
        raise RenderError(msg)

    env = Environment(
        loader=FileSystemLoader(str(template.directory)),
        autoescape=True,
        auto_reload=False,
    )
    for name in sources:
        env.get_template(name)
    return env


class Renderer:
    """Renders the entry template against the live render context.

    Args:
        template: The template set to render.
        store: Source of the render context.
        editor: Include the data-editing overlay when patching.
        collector: Optional sink for render failures.

    """

    def __init__(
        self,
        template: TemplateRef,
        store: DataStore,
        *,
        editor: bool = True,
        collector: PreviewCollector | None = None,
    ) -> None:
        self._template = template
        self._store = store
        self._editor = editor
        self._collector = collector

    @property
    def template(self) -> TemplateRef:
        return self._template

    def render(self, *, patch: bool = False) -> bytes:
        """Render the preview document.

        Args:
            patch: Inject the live-reload script (and the editing overlay
                when enabled) before ``</html>``.

        """
        data_json: str | None = None
        try:
            env = load_environment(self._template)
            entry = env.get_template(self._template.name)
            with self._store.read() as context:
                document = entry.render(context).encode("utf-8")
                if patch and self._editor:
                    data_json = format_context(context)
        except Exception as exc:
            if self._collector is not None:
                self._collector.record_render_failure(str(self._template.path), exc)
            document = render_error_page(exc, self._template)
            if patch and self._editor:
                data_json = self._store.dumps()

        if not patch:
            return document
        return patch_document(document, data_json)
