"""Sample project instantiation for ``mllt new``."""

from __future__ import annotations

import logging
from importlib import resources
from pathlib import Path

from ..core.errors import ScaffoldError
from ..core.models import DEFAULT_CONFIG_NAME

logger = logging.getLogger(__name__)

THEME_FILES = ("style.hbs", "header.hbs", "head.hbs", "footer.hbs", "page.hbs")
CONTENT_FILES = ("index.hbs",)


def _sample(name: str) -> str:
    return (
        resources.files(__package__)
        .joinpath("templates")
        .joinpath(name)
        .read_text(encoding="utf-8")
    )


def create_dir_checked(path: Path, force: bool) -> None:
    """Create ``path`` unless it is a file or a non-empty directory.

    A non-empty directory is accepted when ``force`` is set.
    """
    if path.is_file():
        raise ScaffoldError(f"'{path}' is a file.")
    if path.is_dir():
        is_empty = next(path.iterdir(), None) is None
        if not is_empty and not force:
            raise ScaffoldError(
                f"Project directory '{path}' is non-empty. "
                "To clobber existing files, use `--force`."
            )
        return
    if path.exists():
        raise ScaffoldError(f"'{path}' exists, unidentified record type.")
    path.mkdir(parents=True)


def write_file_checked(path: Path, content: str, force: bool) -> None:
    if path.exists():
        if not force:
            raise ScaffoldError(f"File already exists: {path}")
        logger.warning(f"File already exists and will be overwritten: {path}")
    path.write_text(content, encoding="utf-8")
    logger.debug(f"Wrote {path}")


def instantiate_site(base_path: Path, force: bool = False) -> Path:
    """Create a sample project at ``base_path``.

    Args:
        base_path: Project root to create
        force: Proceed in a non-empty directory, overwriting files

    Returns:
        Path of the generated configuration file
    """
    create_dir_checked(base_path, force)

    config_path = base_path / DEFAULT_CONFIG_NAME
    write_file_checked(config_path, _sample(DEFAULT_CONFIG_NAME), force)

    theme_dir = base_path / "theme"
    create_dir_checked(theme_dir, force)
    for name in THEME_FILES:
        write_file_checked(theme_dir / name, _sample(name), force)

    content_dir = base_path / "content"
    create_dir_checked(content_dir, force)
    for name in CONTENT_FILES:
        write_file_checked(content_dir / name, _sample(name), force)

    create_dir_checked(base_path / "assets", force)

    logger.info(f"Created new site at {base_path}")
    return config_path
