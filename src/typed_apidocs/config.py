"""Documentation settings and their YAML loader."""

from __future__ import annotations

from pathlib import Path
from typing import Any, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .json_types import MutableJSONObject


class ConfigLoadError(RuntimeError):
    """Raised when a settings file cannot be loaded."""


class ContactSettings(BaseModel):
    model_config = ConfigDict(extra="forbid")

    name: Optional[str] = None
    url: Optional[str] = None
    email: Optional[str] = None


class InfoSettings(BaseModel):
    """The ``info`` block shared by both documents."""

    model_config = ConfigDict(extra="forbid")

    title: str = "API"
    version: str = "1.0.0"
    description: Optional[str] = None
    contact: Optional[ContactSettings] = None

    def to_json(self) -> MutableJSONObject:
        return self.model_dump(exclude_none=True)


class DialectSettings(BaseModel):
    """Per-dialect options; ``schemas`` are author-supplied registry entries."""

    model_config = ConfigDict(extra="forbid")

    schemas: dict[str, dict[str, Any]] = Field(default_factory=dict)


class DocsSettings(BaseModel):
    """Where documents are served and which dialects are produced.

    Setting ``swagger`` or ``openapi`` to ``None`` disables that dialect; at
    least one must stay enabled.
    """

    model_config = ConfigDict(extra="forbid")

    path: str = "apidocs"
    forward_root: bool = False
    provide_ui: bool = True
    ui_dir: Optional[Path] = None
    info: InfoSettings = Field(default_factory=InfoSettings)
    swagger: Optional[DialectSettings] = Field(default_factory=DialectSettings)
    openapi: Optional[DialectSettings] = Field(default_factory=DialectSettings)


def load_settings(path: Path) -> DocsSettings:
    """Load and validate documentation settings from YAML."""
    try:
        with path.open("r", encoding="utf-8") as handle:
            payload = yaml.safe_load(handle)
    except OSError as exc:
        raise ConfigLoadError(f"Failed to read settings file {path}: {exc}") from exc
    except yaml.YAMLError as exc:
        raise ConfigLoadError(f"Failed to parse YAML in {path}: {exc}") from exc

    if payload is None:
        payload = {}
    if not isinstance(payload, dict):
        raise ConfigLoadError(f"Settings must deserialize to a mapping, got {type(payload)!r}")

    try:
        return DocsSettings.model_validate(payload)
    except ValidationError as exc:
        raise ConfigLoadError(f"Invalid settings in {path}: {exc}") from exc
