"""Tests for glance._errors."""

from glance._errors import (
    ConfigError,
    DataError,
    GlanceError,
    RenderError,
    WatchError,
)


class TestErrorHierarchy:
    """All glance errors inherit from GlanceError."""

    def test_glance_error_is_exception(self) -> None:
        assert issubclass(GlanceError, Exception)

    def test_config_error_inherits(self) -> None:
        assert issubclass(ConfigError, GlanceError)

    def test_data_error_inherits(self) -> None:
        assert issubclass(DataError, GlanceError)

    def test_watch_error_inherits(self) -> None:
        assert issubclass(WatchError, GlanceError)

    def test_render_error_inherits(self) -> None:
        assert issubclass(RenderError, GlanceError)

    def test_catch_all_glance_errors(self) -> None:
        """All specific errors are catchable via GlanceError."""
        for error_cls in (ConfigError, DataError, WatchError, RenderError):
            try:
                raise error_cls("test")
            except GlanceError:
                pass
