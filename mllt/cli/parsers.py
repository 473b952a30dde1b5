"""CLI argument parsers and validators."""

from __future__ import annotations

import logging
from datetime import timedelta

import typer


def parse_log_level(verbose: int, quiet: bool) -> int:
    """Map ``-v`` count and ``--quiet`` to a logging level."""
    if verbose and quiet:
        raise typer.BadParameter("--verbose and --quiet are mutually exclusive")
    if quiet:
        return logging.ERROR
    return logging.DEBUG if verbose else logging.INFO


def parse_jobs(value: int | None) -> int | None:
    """Validate the worker count; None selects the default."""
    if value is not None and value < 1:
        raise typer.BadParameter(f"Must be at least 1, got: {value}")
    return value


def format_duration(duration: timedelta) -> str:
    """Format a build duration, e.g. ``12ms``, ``3.042s``, ``1m 05.000s``."""
    total_ms = duration // timedelta(milliseconds=1)
    hours, rest = divmod(total_ms, 3_600_000)
    minutes, rest = divmod(rest, 60_000)
    seconds, milliseconds = divmod(rest, 1000)

    if total_ms < 1000:
        return f"{milliseconds}ms"
    if total_ms < 60_000:
        return f"{seconds}.{milliseconds:03}s"
    if total_ms < 3_600_000:
        return f"{minutes}m {seconds:02}.{milliseconds:03}s"
    return f"{hours}h {minutes:02}m {seconds:02}.{milliseconds:03}s"
