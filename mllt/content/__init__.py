"""Content discovery."""

from .catalog import build_catalog, page_identity

__all__ = ["build_catalog", "page_identity"]
