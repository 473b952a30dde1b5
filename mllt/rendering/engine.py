"""Render orchestration: one output file per page."""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from pathlib import Path

from jinja2 import TemplateError, TemplateNotFound

from ..core.errors import RenderError
from ..core.models import Page, Settings
from .context import build_render_context, locate_variable
from .io import atomic_write_text
from .registry import MissingVariableError, TemplateRegistry

logger = logging.getLogger(__name__)


def render_page(
    page: Page, settings: Settings, registry: TemplateRegistry, output_dir: Path
) -> Path:
    """Render a single page and write it below ``output_dir``.

    Args:
        page: Page to render
        settings: Resolved site settings
        registry: Registry holding the page and theme templates
        output_dir: Output root

    Returns:
        Output file path
    """
    logger.debug(f"Rendering page: {page.identity}")

    context = build_render_context(settings, page)
    try:
        rendered_text = registry.render(page.identity, context)
    except MissingVariableError as e:
        variable = locate_variable(context, e.obj, e.name)
        raise RenderError(
            page.identity, f"missing variable '{variable}'", variable=variable
        ) from e
    except TemplateNotFound as e:
        raise RenderError(page.identity, f"theme partial '{e.name}' not found") from e
    except TemplateError as e:
        raise RenderError(page.identity, str(e)) from e
    except Exception as e:
        # evaluation errors such as TypeError or RecursionError from the template
        raise RenderError(page.identity, f"{type(e).__name__}: {e}") from e

    output_path = output_dir / page.output_name
    try:
        atomic_write_text(output_path, rendered_text)
    except OSError as e:
        raise RenderError(page.identity, f"cannot write {output_path}: {e}") from e

    logger.debug(f"Rendered {page.source_path} → {output_path}")
    return output_path


def render_all(
    pages: list[Page],
    settings: Settings,
    registry: TemplateRegistry,
    jobs: int = 1,
) -> tuple[list[Path], list[RenderError]]:
    """Render every page, collecting per-page failures.

    Pages share only read-only state, so they are rendered concurrently.

    Args:
        pages: Pages from the catalog
        settings: Resolved site settings
        registry: Fully populated template registry
        jobs: Worker thread count

    Returns:
        Written output paths and the render errors, both in catalog order
    """
    output_dir = settings.output_dir
    logger.info(f"Rendering {len(pages)} page(s)")

    outputs: list[Path] = []
    errors: list[RenderError] = []
    with ThreadPoolExecutor(max_workers=max(1, jobs)) as executor:
        futures = [
            executor.submit(render_page, page, settings, registry, output_dir)
            for page in pages
        ]
        for future in futures:
            try:
                outputs.append(future.result())
            except RenderError as e:
                errors.append(e)

    logger.info(f"Rendered {len(outputs)} page(s), {len(errors)} failed")
    return outputs, errors
