"""Shared test fixtures for glance."""

from __future__ import annotations

from dataclasses import dataclass, field
from pathlib import Path

import pytest

from glance.config import PreviewConfig

INDEX_TEMPLATE = """\
<!DOCTYPE html>
<html>
<body>
{% include "header.html" %}
<p>Hello {{ name }}</p>
</body>
</html>
"""


@pytest.fixture
def template_dir(tmp_path: Path) -> Path:
    """A template directory with an entry template and one partial.

    ``index.html`` includes ``header.html`` and references ``name``.
    """
    site = tmp_path / "site"
    site.mkdir()
    (site / "index.html").write_text(INDEX_TEMPLATE)
    (site / "header.html").write_text("<h1>Preview</h1>")
    return site


@pytest.fixture
def config(template_dir: Path) -> PreviewConfig:
    """A PreviewConfig for the fixture template with ``name`` set."""
    return PreviewConfig(template=template_dir / "index.html", data='{"name": "World"}')


@dataclass
class FakeRequest:
    """Minimal stand-in for a Chirp request."""

    method: str = "GET"
    path: str = "/"
    payload: bytes = b""
    error: Exception | None = None
    query: dict[str, str] = field(default_factory=dict)
    headers: dict[str, str] = field(default_factory=dict)

    async def body(self) -> bytes:
        if self.error is not None:
            raise self.error
        return self.payload
