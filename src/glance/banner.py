"""Startup banner — what is being previewed and where.

Plain text when ``NO_COLOR`` is set, ``TERM`` is ``dumb``, or stderr is not
a terminal.
"""

from __future__ import annotations

import os
import sys
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from glance.config import PreviewConfig


def _use_color() -> bool:
    # https://no-color.org
    if os.environ.get("NO_COLOR") or os.environ.get("TERM") == "dumb":
        return False
    isatty = getattr(sys.stderr, "isatty", None)
    return bool(isatty and isatty())


_COLOR = _use_color()


def _paint(text: str, *codes: int) -> str:
    if not _COLOR or not codes:
        return text
    sgr = ";".join(str(c) for c in codes)
    return f"\033[{sgr}m{text}\033[0m"


def _dim(text: str) -> str:
    return _paint(text, 2)


def _link(url: str) -> str:
    """*url* as an OSC 8 hyperlink on capable terminals."""
    if not _COLOR:
        return url
    return f"\033]8;;{url}\033\\{_paint(url, 1, 36)}\033]8;;\033\\"


def print_banner(
    config: PreviewConfig,
    *,
    source_count: int = 0,
    load_ms: float = 0.0,
    warnings: list[str] | None = None,
) -> None:
    """Print the Glance startup banner to stderr.

    Args:
        config: Resolved PreviewConfig.
        source_count: Number of files in the template set.
        load_ms: Startup time in milliseconds.
        warnings: Messages shown under the banner.

    """
    from glance import __version__

    noun = "file" if source_count == 1 else "files"
    timing = " " + _dim(f"in {load_ms:.0f}ms") if load_ms > 0 else ""
    editor = _paint("on", 32) if config.editor else _dim("off")

    rows = [
        f"previewing {_dim(str(config.template))}{timing}",
        f"{source_count} template {noun} in {_dim(str(config.template_dir))}",
        f"data editor: {editor}",
    ]

    out = ["", f"  {_paint('Glance', 1)} {_dim('v' + __version__)}", ""]
    for i, row in enumerate(rows):
        branch = "└─" if i == len(rows) - 1 else "├─"
        out.append(f"  {_dim(branch)} {row}")
    out += ["", f"  {_link(config.url)}", "", f"  {_dim('Watching for changes...')}"]
    for warning in warnings or ():
        out.append(f"  {_paint('!', 33)} {warning}")
    out.append("")

    print("\n".join(out), file=sys.stderr)
