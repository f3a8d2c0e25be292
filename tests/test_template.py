"""Tests for glance.content.template — the template set on disk."""

from __future__ import annotations

from pathlib import Path

import pytest

from glance.content.template import TemplateRef


class TestTemplateRef:

    def test_directory_and_name(self, template_dir: Path) -> None:
        ref = TemplateRef(template_dir / "index.html")
        assert ref.directory == template_dir
        assert ref.name == "index.html"

    def test_frozen(self, template_dir: Path) -> None:
        ref = TemplateRef(template_dir / "index.html")
        with pytest.raises(AttributeError):
            ref.path = template_dir  # type: ignore[misc]

    def test_sources_lists_every_sibling(self, template_dir: Path) -> None:
        (template_dir / "footer.html").write_text("<footer></footer>")
        ref = TemplateRef(template_dir / "index.html")
        assert ref.sources() == ["footer.html", "header.html", "index.html"]

    def test_sources_skip_hidden_dirs_and_config(self, template_dir: Path) -> None:
        (template_dir / ".index.html.swp").write_text("junk")
        (template_dir / "partials").mkdir()
        (template_dir / "glance.toml").write_text("port = 1\n")
        ref = TemplateRef(template_dir / "index.html")
        assert ref.sources() == ["header.html", "index.html"]
