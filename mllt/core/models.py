"""Domain models for site configuration, pages and build results."""

from __future__ import annotations

from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from .errors import AssetCopyError, RenderError

DEFAULT_CONFIG_NAME = "mllt.toml"
TEMPLATE_SUFFIX = ".hbs"


class SiteOptions(BaseModel):
    """The ``[site]`` table of a project configuration."""

    model_config = ConfigDict(frozen=True, extra="ignore", populate_by_name=True)

    base_url: str = Field(..., alias="baseURL", description="Site base URL")
    publishdir: Path = Field(
        default=Path("./html"), description="Where rendered artifacts are written"
    )
    content: Path = Field(
        default=Path("./content"), description="Content templates folder"
    )
    theme: Path | None = Field(
        default=Path("./theme"), description="Theme partials folder"
    )
    assets: Path | None = Field(
        default=None, description="Static assets copied verbatim to the output"
    )
    strict: bool = Field(
        default=False, description="Treat missing template variables as errors"
    )

    @field_validator("publishdir", "content", "theme", "assets", mode="before")
    @classmethod
    def _reject_empty_path(cls, value: Any) -> Any:
        # Path("") silently becomes Path("."), so catch it before coercion
        if isinstance(value, str) and not value.strip():
            raise ValueError("path must not be empty")
        return value


class Settings(BaseModel):
    """Fully resolved, immutable settings for one build."""

    model_config = ConfigDict(frozen=True)

    site: SiteOptions
    params: dict[str, Any] = Field(
        default_factory=dict, description="User parameters, exposed verbatim"
    )
    root: Path = Field(
        default_factory=Path.cwd, description="Base directory for relative paths"
    )

    def resolve_path(self, path: Path) -> Path:
        return path if path.is_absolute() else self.root / path

    @property
    def output_dir(self) -> Path:
        return self.resolve_path(self.site.publishdir)

    @property
    def content_dir(self) -> Path:
        return self.resolve_path(self.site.content)

    @property
    def theme_dir(self) -> Path | None:
        if self.site.theme is None:
            return None
        return self.resolve_path(self.site.theme)

    @property
    def assets_dir(self) -> Path | None:
        if self.site.assets is None:
            return None
        return self.resolve_path(self.site.assets)

    def site_context(self) -> dict[str, Any]:
        """Return the ``[site]`` table as templates see it."""
        return self.site.model_dump(mode="json", by_alias=True)


class Page(BaseModel):
    """One content template and the output file it produces."""

    model_config = ConfigDict(frozen=True)

    identity: str = Field(..., description="Extension-less, '/'-separated path")
    source_path: Path = Field(..., description="Content template file")
    body: str = Field(..., description="Raw template text")

    @property
    def output_name(self) -> str:
        return f"{self.identity}.html"


class AssetEntry(BaseModel):
    """One file under the assets root."""

    model_config = ConfigDict(frozen=True)

    relative_path: str = Field(..., description="'/'-separated path below the root")
    source_path: Path
    signature: str = Field(..., description="Freshness signature of the source")


class SyncReport(BaseModel):
    """Outcome of one asset synchronization."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    copied: list[str] = Field(default_factory=list)
    skipped: list[str] = Field(default_factory=list)
    pruned: list[str] = Field(default_factory=list)
    errors: list[AssetCopyError] = Field(default_factory=list)


class BuildReport(BaseModel):
    """Outcome of a full build: written pages plus accumulated failures."""

    model_config = ConfigDict(arbitrary_types_allowed=True)

    rendered: list[Path] = Field(default_factory=list)
    render_errors: list[RenderError] = Field(default_factory=list)
    sync: SyncReport = Field(default_factory=SyncReport)

    @property
    def errors(self) -> list[Exception]:
        return [*self.render_errors, *self.sync.errors]

    @property
    def failed(self) -> bool:
        return bool(self.errors)
