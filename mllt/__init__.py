"""mllt - a tiny static site generator for self-hosted linktree-like pages.

Renders a tree of Jinja2/Handlebars-flavoured templates and a TOML site
configuration into static HTML plus mirrored assets.
"""

__version__ = "0.1.0"

# Configure logging for library use
import logging

logging.getLogger(__name__).addHandler(logging.NullHandler())

# Re-export main CLI entry point
from .cli import main

__all__ = ["main"]
