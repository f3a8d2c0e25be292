"""Glance — a live-reloading template preview server.

Renders one template against a JSON render context, watches the template's
directory, and pushes every re-render to connected browsers over SSE.  The
render context can be edited live from an overlay in the preview page.

Quick start::

    import glance

    glance.preview("templates/invoice.html", data='{"customer": "Ada"}')

Built on the Bengal stack:

    chirp       Web framework     (routes, SSE)
    pounce      ASGI server       (serves the app)
    kida        Template engine   (renders the preview)

"""

# PEP 703: Declare this module as free-threading safe
_Py_mod_gil = 0

__version__ = "0.1.0-dev"
__all__ = [
    "PreviewConfig",
    "__version__",
    "preview",
]


def __getattr__(name: str) -> object:
    """Lazy imports for the public API.

    Keeps ``import glance`` fast; chirp and kida load on first use.
    """
    if name == "PreviewConfig":
        from glance.config import PreviewConfig

        return PreviewConfig

    if name == "preview":
        from glance.app import preview

        return preview

    msg = f"module {__name__!r} has no attribute {name!r}"
    raise AttributeError(msg)
