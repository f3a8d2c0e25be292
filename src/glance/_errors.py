"""Glance error hierarchy.

All glance-specific errors inherit from GlanceError for easy catching.
"""


class GlanceError(Exception):
    """Base error for all glance operations."""


class ConfigError(GlanceError):
    """Invalid or missing configuration (fatal at startup)."""


class DataError(GlanceError):
    """Render context update rejected (not a JSON object)."""


class WatchError(GlanceError):
    """File watcher could not be established."""


class RenderError(GlanceError):
    """Template could not be parsed or executed."""
