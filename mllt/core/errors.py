"""mllt error hierarchy.

All project exceptions inherit from MlltError, enabling:
- ``except MlltError`` at the CLI boundary
- Fine-grained catches deeper in the pipeline (``except RenderError``)

Hierarchy:
    MlltError
    ├── ConfigError          # fatal, raised before any rendering
    ├── CatalogError         # fatal, page identity collisions
    ├── TemplateLoadError    # fatal, unreadable or unparsable template
    ├── RenderError          # per page, accumulated in BuildReport
    ├── AssetCopyError       # per asset, accumulated in BuildReport
    └── ScaffoldError        # ``mllt new``
"""

from __future__ import annotations


class MlltError(Exception):
    """Base class for all mllt errors."""


class ConfigError(MlltError):
    """Malformed, missing or unparsable site configuration."""


class CatalogError(MlltError):
    """Two content files map to the same page identity."""


class TemplateLoadError(MlltError):
    """A theme partial or content template cannot be read or compiled."""


class RenderError(MlltError):
    """A single page failed to render.

    Attributes:
        identity: Identity of the page being rendered
        variable: Dotted path of the missing variable, for strict-mode failures
    """

    def __init__(self, identity: str, message: str, variable: str | None = None):
        self.identity = identity
        self.variable = variable
        super().__init__(f"{identity}: {message}")


class AssetCopyError(MlltError):
    """A single asset could not be copied or pruned."""

    def __init__(self, relative_path: str, message: str):
        self.relative_path = relative_path
        super().__init__(f"{relative_path}: {message}")


class ScaffoldError(MlltError):
    """A new project could not be created at the requested location."""
