"""Automatic template variables."""

from __future__ import annotations

from functools import lru_cache
from importlib import resources
from typing import Any

from jinja2.utils import missing

from ..core.models import Page, Settings

# Variables every page and every theme partial can see
AUTOMATIC_KEYS = ("site", "page", "params", "_bundled_normalize")


@lru_cache(maxsize=1)
def bundled_normalize() -> str:
    """Return the bundled normalize.css reset stylesheet."""
    return (
        resources.files("mllt")
        .joinpath("data/normalize.min.css")
        .read_text(encoding="utf-8")
    )


def build_render_context(settings: Settings, page: Page) -> dict[str, Any]:
    """Build the variables a page is rendered with.

    Args:
        settings: Resolved site settings
        page: Page being rendered

    Returns:
        Fresh context mapping holding exactly the automatic variables
    """
    return {
        "site": settings.site_context(),
        "page": page.identity,
        "params": settings.params,
        "_bundled_normalize": bundled_normalize(),
    }


def _find_path(value: Any, target: Any, path: tuple[str, ...]) -> tuple[str, ...] | None:
    if value is target:
        return path
    if isinstance(value, dict):
        children = value.items()
    elif isinstance(value, (list, tuple)):
        children = enumerate(value)
    else:
        return None
    for key, child in children:
        found = _find_path(child, target, (*path, str(key)))
        if found is not None:
            return found
    return None


def locate_variable(context: dict[str, Any], obj: Any, name: Any) -> str:
    """Return the dotted path of a failed lookup of ``name`` on ``obj``.

    ``obj`` is searched for by identity inside ``context``; lookups on
    values that are not part of the context (loop variables, ``set``
    results) fall back to the bare name.
    """
    if obj is missing:
        return str(name)
    for key, value in context.items():
        found = _find_path(value, obj, (key,))
        if found is not None:
            return ".".join((*found, str(name)))
    return str(name)
