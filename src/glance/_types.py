"""Shared type definitions for glance."""

from collections.abc import Callable

# Any value that survives a JSON round trip
type JSONValue = None | bool | int | float | str | list[JSONValue] | dict[str, JSONValue]

# The object templates are rendered against
type RenderContext = dict[str, JSONValue]

# Zero-argument callback fired when the rendered output may have changed
type ChangeListener = Callable[[], object]
