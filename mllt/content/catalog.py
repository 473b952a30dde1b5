"""Page catalog: content discovery and page identity derivation."""

from __future__ import annotations

import logging
from pathlib import Path, PurePath

from ..core.errors import CatalogError, ConfigError, TemplateLoadError
from ..core.models import TEMPLATE_SUFFIX, Page

logger = logging.getLogger(__name__)


def is_template(path: Path) -> bool:
    return path.suffix.lower() == TEMPLATE_SUFFIX


def page_identity(path: PurePath, content_root: PurePath) -> str:
    """Derive a page identity from a content file's location.

    The identity is the path relative to the content root, without its
    extension, using '/' as separator on every platform.

    Args:
        path: Content template file
        content_root: Root of the content tree

    Returns:
        Page identity, e.g. ``blog/first-post``
    """
    relative = path.relative_to(content_root)
    return relative.with_suffix("").as_posix()


def read_template_text(path: Path) -> str:
    try:
        return path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as e:
        raise TemplateLoadError(f"Cannot read template {path}: {e}") from e


def build_catalog(content_root: Path) -> list[Page]:
    """Walk the content root and build the ordered list of pages.

    Args:
        content_root: Directory holding content templates

    Returns:
        Pages sorted by identity
    """
    if not content_root.is_dir():
        raise ConfigError(f"Content directory not found: {content_root}")

    pages: dict[str, Page] = {}
    for path in sorted(content_root.rglob("*")):
        if not path.is_file() or not is_template(path):
            continue
        identity = page_identity(path, content_root)
        if identity in pages:
            raise CatalogError(
                f"Page identity {identity!r} produced by both "
                f"{pages[identity].source_path} and {path}"
            )
        pages[identity] = Page(
            identity=identity, source_path=path, body=read_template_text(path)
        )
        logger.debug(f"Found page {identity} ({path})")

    logger.debug(f"Catalog: {len(pages)} page(s)")
    return [pages[identity] for identity in sorted(pages)]
