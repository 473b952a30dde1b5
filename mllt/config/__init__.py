"""Site configuration resolution."""

from .resolver import (
    BuildOverrides,
    load_document,
    load_settings,
    parse_document,
    resolve_settings,
)

__all__ = [
    "BuildOverrides",
    "load_document",
    "load_settings",
    "parse_document",
    "resolve_settings",
]
