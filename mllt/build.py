"""Full site build: resolve, catalog, render, sync."""

from __future__ import annotations

import logging
import os

from .assets import sync_assets
from .content import build_catalog
from .core.models import BuildReport, Settings
from .rendering import TemplateRegistry, render_all

logger = logging.getLogger(__name__)


def default_jobs() -> int:
    return max(1, min(os.cpu_count() or 1, 32))


def build_site(
    settings: Settings,
    *,
    jobs: int | None = None,
    prune: bool = True,
    checksum: bool = False,
) -> BuildReport:
    """Run one complete build.

    Configuration, catalog and template errors are fatal and raised.
    Per-page and per-asset failures are collected in the returned report.

    Args:
        settings: Resolved site settings
        jobs: Worker thread count for rendering and copying
        prune: Delete stale assets this tool copied earlier
        checksum: Compare assets by content hash instead of size and mtime

    Returns:
        Build report
    """
    jobs = jobs or default_jobs()
    output_dir = settings.output_dir
    logger.info(f'Building site to "{output_dir}"')

    pages = build_catalog(settings.content_dir)

    registry = TemplateRegistry(strict=settings.site.strict)
    registry.load_theme(settings.theme_dir)
    registry.add_pages(pages)

    output_dir.mkdir(parents=True, exist_ok=True)
    rendered, render_errors = render_all(pages, settings, registry, jobs=jobs)

    sync = sync_assets(
        settings.assets_dir,
        output_dir,
        prune=prune,
        checksum=checksum,
        protected={page.output_name for page in pages},
        jobs=jobs,
    )
    return BuildReport(rendered=rendered, render_errors=render_errors, sync=sync)
