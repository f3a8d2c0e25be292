"""Glance CLI — ``glance [template] [--addr HOST:PORT] [--data JSON|@file]``.

Entry point for the ``glance`` command-line interface.
"""

from __future__ import annotations

import argparse
import sys

from glance._errors import GlanceError


def _build_parser() -> argparse.ArgumentParser:
    """Build the argument parser for the glance CLI."""
    parser = argparse.ArgumentParser(
        prog="glance",
        description="Live-reloading template preview server.",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s {_get_version()}",
    )
    parser.add_argument(
        "template",
        nargs="?",
        default="template.html",
        help="Template to preview; every file in its directory is part of the set",
    )
    parser.add_argument(
        "--addr",
        default=None,
        help="Listen address as HOST:PORT (default localhost:9654; $PORT overrides)",
    )
    parser.add_argument(
        "--data",
        default=None,
        help="Initial data as a JSON object literal, or @path to a JSON file",
    )
    parser.add_argument(
        "--no-editor",
        dest="editor",
        action="store_false",
        default=None,
        help="Do not inject the data-editing overlay",
    )
    return parser


def _get_version() -> str:
    """Get the package version."""
    from glance import __version__

    return __version__


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = _build_parser()
    args = parser.parse_args(argv)

    from glance.app import preview

    try:
        preview(args.template, addr=args.addr, data=args.data, editor=args.editor)
    except GlanceError as exc:
        print(f"glance: {exc}", file=sys.stderr)
        sys.exit(1)


if __name__ == "__main__":
    main()
