"""Main CLI application."""

from __future__ import annotations

import logging
import time
from datetime import timedelta
from pathlib import Path
from typing import Optional

import typer
from typing_extensions import Annotated

from ..build import build_site
from ..config import BuildOverrides, load_settings
from ..core.errors import MlltError
from ..core.models import DEFAULT_CONFIG_NAME
from ..scaffold import instantiate_site
from .parsers import format_duration, parse_jobs, parse_log_level

logger = logging.getLogger(__name__)

app = typer.Typer(
    name="mllt",
    help="A tiny static site generator designed for self-hosting linktree-like pages.",
    no_args_is_help=True,
)


@app.callback()
def configure(
    verbose: Annotated[
        int,
        typer.Option(
            "--verbose",
            "-v",
            count=True,
            help="Increase verbosity (repeatable).",
        ),
    ] = 0,
    quiet: Annotated[
        bool,
        typer.Option(
            "--quiet",
            "-q",
            help="Suppress all messages besides errors.",
        ),
    ] = False,
) -> None:
    """Configure logging for every command."""
    level = parse_log_level(verbose, quiet)
    logging.basicConfig(level=level, format="[%(levelname)s] %(message)s")
    logging.getLogger("mllt").setLevel(level)
    logger.debug("Strike the Earth!")


@app.command()
def build(
    config: Annotated[
        Path,
        typer.Option(
            "--config",
            "-c",
            help="Path to the config file.",
            metavar="PATH",
        ),
    ] = Path(DEFAULT_CONFIG_NAME),
    output: Annotated[
        Optional[str],
        typer.Option(
            "--output",
            "-o",
            help="Override the output folder from the config file.",
            metavar="DIR",
        ),
    ] = None,
    content: Annotated[
        Optional[str],
        typer.Option(
            "--content",
            help="Override the content folder from the config file.",
            metavar="DIR",
        ),
    ] = None,
    theme: Annotated[
        Optional[str],
        typer.Option(
            "--theme",
            help="Override the theme folder from the config file.",
            metavar="DIR",
        ),
    ] = None,
    assets: Annotated[
        Optional[str],
        typer.Option(
            "--assets",
            help="Override the assets folder from the config file.",
            metavar="DIR",
        ),
    ] = None,
    strict: Annotated[
        Optional[bool],
        typer.Option(
            "--strict/--no-strict",
            help="Treat missing template variables as errors (default: from config).",
            show_default=False,
        ),
    ] = None,
    jobs: Annotated[
        Optional[int],
        typer.Option(
            "--jobs",
            "-j",
            help="Worker threads for rendering and copying (default: CPU count).",
            metavar="N",
        ),
    ] = None,
    prune: Annotated[
        bool,
        typer.Option(
            "--prune/--no-prune",
            help="Delete output assets this tool copied earlier whose source is gone.",
        ),
    ] = True,
    checksum: Annotated[
        bool,
        typer.Option(
            "--checksum",
            help="Compare assets by content hash instead of size and mtime.",
        ),
    ] = False,
) -> None:
    """Render the site to static HTML."""
    started = time.perf_counter()
    overrides = BuildOverrides(
        output=output, content=content, theme=theme, assets=assets, strict=strict
    )

    try:
        settings = load_settings(config, overrides)
        report = build_site(
            settings, jobs=parse_jobs(jobs), prune=prune, checksum=checksum
        )
    except MlltError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e

    for error in report.errors:
        logger.error(str(error))
    if report.failed:
        logger.error(f"Build finished with {len(report.errors)} error(s)")
        raise typer.Exit(code=1)

    elapsed = timedelta(seconds=time.perf_counter() - started)
    logger.info(f"Done! Took {format_duration(elapsed)}")


@app.command()
def new(
    base_path: Annotated[
        Path,
        typer.Argument(help="Path of the project root to create.", metavar="PATH"),
    ],
    force: Annotated[
        bool,
        typer.Option(
            "--force",
            help="Create the project even in a non-empty directory, overwriting files.",
        ),
    ] = False,
) -> None:
    """Create a new mllt site at the given path."""
    try:
        instantiate_site(base_path, force=force)
    except MlltError as e:
        logger.error(str(e))
        raise typer.Exit(code=1) from e


app.command("b", hidden=True)(build)
app.command("n", hidden=True)(new)


def main() -> None:
    """Entry point for the CLI."""
    app()


if __name__ == "__main__":
    main()
