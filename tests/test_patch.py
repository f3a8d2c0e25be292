"""Tests for glance.render.patch — live-reload script injection."""

from __future__ import annotations

import json

from glance.render.patch import CLOSING_TAG, client_script, patch


class TestPatch:
    """patch() — inject before the first </html>."""

    def test_injects_before_closing_tag(self) -> None:
        doc = b"<html><body><p>hi</p></body></html>\n<!-- tail -->"
        out = patch(doc)

        block = client_script(None).encode()
        pos = doc.index(CLOSING_TAG)
        assert out == doc[:pos] + block + doc[pos:]

    def test_order_prefix_block_tag_suffix(self) -> None:
        doc = b"<html><body>before</body></html>after"
        out = patch(doc, '{"a": 1}')

        assert out.startswith(b"<html><body>before</body>")
        assert out.endswith(b"</html>after")
        assert out.index(b"glance-live-reload") < out.index(b"</html>")
        assert out.index(b"glance-editor-script") < out.index(b"</html>")

    def test_no_closing_tag_unchanged(self) -> None:
        doc = b"<p>fragment</p>"
        assert patch(doc, "{}") is doc

    def test_only_first_closing_tag(self) -> None:
        doc = b"<html></html><html></html>"
        out = patch(doc)
        assert out.count(b"glance-live-reload") == 1
        assert out.endswith(b"</html><html></html>")

    def test_empty_document(self) -> None:
        assert patch(b"") == b""


class TestClientScript:
    """The injected script asset."""

    def test_reload_only_without_data(self) -> None:
        script = client_script(None)
        assert "new EventSource('/sse')" in script
        assert "glance-editor-script" not in script

    def test_editor_included_with_data(self) -> None:
        script = client_script('{\n    "name": "Ada"\n}')
        assert "glance-editor-script" in script
        assert "fetch('/data'" in script
        assert "EventSource" in script

    def test_data_embedded_as_string_literal(self) -> None:
        data = '{\n    "name": "Ada"\n}'
        script = client_script(data)
        assert json.dumps(data) in script
        assert "__GLANCE_DATA__" not in script

    def test_data_cannot_close_the_script_tag(self) -> None:
        data = '{"html": "</script><script>alert(1)</script>"}'
        script = client_script(data)
        # Only the two script blocks' own closing tags remain.
        assert script.count("</script>") == 2
        assert "<\\/script>" in script

    def test_backticks_in_data_are_harmless(self) -> None:
        data = '{"code": "`rm -rf`"}'
        assert json.dumps(data) in client_script(data)
