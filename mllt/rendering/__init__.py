"""Template loading and page rendering."""

from .context import AUTOMATIC_KEYS, build_render_context
from .engine import render_all, render_page
from .registry import TemplateRegistry, ThemeExtension

__all__ = [
    "AUTOMATIC_KEYS",
    "TemplateRegistry",
    "ThemeExtension",
    "build_render_context",
    "render_all",
    "render_page",
]
