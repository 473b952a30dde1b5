"""Shared helpers for laying out projects on disk."""

from pathlib import Path

from mllt.core.models import Settings, SiteOptions


def write_tree(root: Path, files: dict[str, str]) -> None:
    """Write ``{relative path: text}`` below ``root``."""
    for relative, text in files.items():
        path = root / relative
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(text, encoding="utf-8")


def make_settings(root: Path, params: dict | None = None, **site) -> Settings:
    site.setdefault("baseURL", "example.com")
    site.setdefault("publishdir", "output")
    return Settings(
        site=SiteOptions.model_validate(site), params=params or {}, root=root
    )
