"""Render layer — template execution, live-reload patching, error documents."""

from glance.render.error_page import render_error_page
from glance.render.patch import client_script, patch
from glance.render.renderer import Renderer, load_environment

__all__ = [
    "Renderer",
    "client_script",
    "load_environment",
    "patch",
    "render_error_page",
]
