"""Configuration loading and CLI override resolution."""

from __future__ import annotations

import logging
import tomllib
from pathlib import Path
from typing import Any

from pydantic import BaseModel, ConfigDict, ValidationError

from ..core.errors import ConfigError
from ..core.models import Settings, SiteOptions

logger = logging.getLogger(__name__)


class BuildOverrides(BaseModel):
    """Command-line values that take precedence over the config file.

    ``None`` means the flag was not supplied.
    """

    model_config = ConfigDict(frozen=True)

    output: Path | str | None = None
    content: Path | str | None = None
    theme: Path | str | None = None
    assets: Path | str | None = None
    strict: bool | None = None


# override field -> [site] key
_OVERRIDE_KEYS = {
    "output": "publishdir",
    "content": "content",
    "theme": "theme",
    "assets": "assets",
    "strict": "strict",
}


def parse_document(text: str, source: str = "<string>") -> dict[str, Any]:
    """Parse a TOML configuration document.

    Args:
        text: Raw TOML text
        source: Name used in error messages

    Returns:
        Parsed document
    """
    try:
        return tomllib.loads(text)
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid TOML in config file {source}: {e}") from e


def load_document(path: Path) -> dict[str, Any]:
    """Read and parse a TOML configuration file."""
    try:
        text = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except OSError as e:
        raise ConfigError(f"Error opening: {path}: {e}") from e
    return parse_document(text, str(path))


def _format_validation_error(error: ValidationError) -> str:
    parts = []
    for item in error.errors():
        location = ".".join(str(part) for part in item["loc"]) or "site"
        parts.append(f"site.{location}: {item['msg']}")
    return "; ".join(parts)


def _known_site_keys() -> set[str]:
    keys = set()
    for name, field in SiteOptions.model_fields.items():
        keys.add(name)
        if field.alias:
            keys.add(field.alias)
    return keys


def resolve_settings(
    document: dict[str, Any],
    overrides: BuildOverrides | None = None,
    root: Path | None = None,
) -> Settings:
    """Merge a parsed configuration document with CLI overrides.

    Precedence per option: CLI override > config file > built-in default.
    ``[params]`` is passed through verbatim.

    Args:
        document: Parsed configuration document
        overrides: Values supplied on the command line
        root: Directory relative site paths are resolved against

    Returns:
        Immutable resolved settings
    """
    overrides = overrides or BuildOverrides()

    site_table = document.get("site")
    if not isinstance(site_table, dict):
        raise ConfigError("Config is missing the [site] table")

    params = document.get("params", {})
    if not isinstance(params, dict):
        raise ConfigError("[params] must be a table")

    for key in sorted(set(site_table) - _known_site_keys()):
        logger.warning(f"Ignoring unknown config key: site.{key}")

    merged = dict(site_table)
    for field, key in _OVERRIDE_KEYS.items():
        value = getattr(overrides, field)
        if value is None:
            continue
        if isinstance(value, Path):
            value = str(value)
        logger.debug(f"CLI override: site.{key} = {value!r}")
        merged[key] = value

    try:
        site = SiteOptions.model_validate(merged)
    except ValidationError as e:
        raise ConfigError(_format_validation_error(e)) from e

    settings = Settings(site=site, params=params, root=root or Path.cwd())
    logger.debug(f"Final config: {settings!r}")
    return settings


def load_settings(
    config_path: Path, overrides: BuildOverrides | None = None
) -> Settings:
    """Load a config file and resolve it against ``overrides``.

    Relative site paths resolve against the config file's directory.
    """
    document = load_document(config_path)
    return resolve_settings(
        document, overrides, root=config_path.resolve().parent
    )
