"""Error document — renders a template failure as a complete HTML page.

Shown in place of the preview on both ``/`` and ``/sse`` whenever the
template set fails to parse or execute, so a broken template degrades the
preview instead of crashing the server.  The live-reload stream keeps
running and the page recovers on the next successful render.
"""

from __future__ import annotations

import html
import traceback
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from glance.content.template import TemplateRef


# Lines shown on each side of the failing line.
EXCERPT_RADIUS = 4

_ERROR_PAGE = """\
<!DOCTYPE html>
<html lang="en">
<head>
<meta charset="utf-8">
<title>Glance: {error_type}</title>
<style>
html{{background:#fbf7f2;color:#2b2522}}
body{{margin:0 auto;max-width:56rem;padding:2.5rem 1.25rem;
  font:15px/1.5 system-ui,-apple-system,"Segoe UI",sans-serif}}
header{{border-top:6px solid #c0392b;padding-top:1rem;margin-bottom:1.75rem}}
header h1{{margin:0;font-size:1.35rem;color:#c0392b}}
header code{{display:block;margin-top:0.2rem;color:#7a706a;font-size:0.85rem}}
.message{{margin:1rem 0 0;padding:0.75rem 1rem;background:#fdecea;
  border-radius:4px;white-space:pre-wrap;word-break:break-word}}
code,pre,table.excerpt{{font-family:"JetBrains Mono",Menlo,Consolas,monospace}}
figure{{margin:0 0 1.75rem}}
figcaption{{font-size:0.8rem;color:#7a706a;margin-bottom:0.35rem}}
table.excerpt{{width:100%;border-collapse:collapse;font-size:0.85rem;
  background:#fff;border:1px solid #e6ddd5}}
table.excerpt td{{padding:0 0.75rem;white-space:pre;vertical-align:top}}
table.excerpt td.ln{{width:1%;text-align:right;color:#b3a79e;user-select:none}}
table.excerpt tr.hit{{background:#fbe3df}}
table.excerpt tr.hit td.ln{{color:#c0392b;font-weight:700}}
details summary{{cursor:pointer;color:#7a706a;font-size:0.85rem}}
details pre{{margin:0.5rem 0 0;padding:0.75rem 1rem;background:#fff;
  border:1px solid #e6ddd5;font-size:0.8rem;overflow:auto;max-height:24rem}}
</style>
</head>
<body>
<header>
  <h1>{error_type}</h1>
  <code>{template_path}</code>
  <p class="message">{error_message}</p>
</header>
{excerpt}
<details>
  <summary>Stack trace</summary>
  <pre>{stack_trace}</pre>
</details>
</body>
</html>
"""


def _source_excerpt(path: Path, lineno: int, radius: int = EXCERPT_RADIUS) -> str:
    """The lines of *path* around *lineno* as an HTML table, or ``""``."""
    if lineno <= 0:
        return ""
    try:
        lines = path.read_text(encoding="utf-8", errors="replace").splitlines()
    except OSError:
        return ""
    if lineno > len(lines):
        return ""

    rows = []
    for n in range(max(1, lineno - radius), min(len(lines), lineno + radius) + 1):
        hit = ' class="hit"' if n == lineno else ""
        rows.append(
            f'<tr{hit}><td class="ln">{n}</td><td>{html.escape(lines[n - 1])}</td></tr>'
        )
    caption = html.escape(f"{path}:{lineno}")
    return (
        f"<figure><figcaption>{caption}</figcaption>"
        f'<table class="excerpt">{"".join(rows)}</table></figure>'
    )


def _error_location(exc: BaseException, template: TemplateRef) -> tuple[Path, int]:
    """Find the template file and line an error points at.

    Template engines report a template name (relative to the loader root) or
    a path plus a line number; fall back to the entry template.
    """
    lineno = getattr(exc, "lineno", None)
    if not isinstance(lineno, int):
        lineno = 0

    name = getattr(exc, "filename", None) or getattr(exc, "name", None)
    if isinstance(name, str) and name:
        candidate = template.directory / name
        if candidate.is_file():
            return candidate, lineno
    return template.path, lineno


def render_error_page(exc: BaseException, template: TemplateRef) -> bytes:
    """Render a full HTML error document for a failed render of *template*."""
    path, lineno = _error_location(exc, template)
    trace = "".join(traceback.format_exception(exc))
    page = _ERROR_PAGE.format(
        error_type=html.escape(type(exc).__qualname__),
        template_path=html.escape(str(path)),
        error_message=html.escape(str(exc)),
        excerpt=_source_excerpt(path, lineno),
        stack_trace=html.escape(trace),
    )
    return page.encode("utf-8")
