"""Tests for loading documentation settings from YAML."""

from __future__ import annotations

from pathlib import Path

import pytest

from typed_apidocs.config import ConfigLoadError, DocsSettings, load_settings


def _write(tmp_path: Path, text: str) -> Path:
    path = tmp_path / "apidocs.yaml"
    path.write_text(text, encoding="utf-8")
    return path


def test_defaults_enable_both_dialects() -> None:
    """Out of the box both documents and the UI are on."""
    settings = DocsSettings()
    assert settings.path == "apidocs"
    assert settings.swagger is not None
    assert settings.openapi is not None
    assert settings.info.to_json() == {"title": "API", "version": "1.0.0"}


def test_load_settings(tmp_path: Path) -> None:
    """YAML maps onto the settings models, including disabled dialects."""
    path = _write(
        tmp_path,
        """
path: docs
forward_root: true
info:
  title: Pet store
  version: 2.0.0
  contact:
    email: pets@example.com
swagger: null
openapi:
  schemas:
    PetInput:
      type: object
""",
    )
    settings = load_settings(path)
    assert settings.path == "docs"
    assert settings.forward_root
    assert settings.swagger is None
    assert settings.openapi.schemas == {"PetInput": {"type": "object"}}
    assert settings.info.to_json() == {
        "title": "Pet store",
        "version": "2.0.0",
        "contact": {"email": "pets@example.com"},
    }


def test_empty_file_gives_defaults(tmp_path: Path) -> None:
    """An empty document is the same as no overrides."""
    assert load_settings(_write(tmp_path, "")) == DocsSettings()


@pytest.mark.parametrize(
    ("text", "message"),
    [
        ("- a\n- b\n", "must deserialize to a mapping"),
        ("path: [unclosed\n", "Failed to parse YAML"),
        ("unknown_key: 1\n", "Invalid settings"),
    ],
)
def test_invalid_settings(tmp_path: Path, text: str, message: str) -> None:
    """Every load failure surfaces as ``ConfigLoadError``."""
    with pytest.raises(ConfigLoadError, match=message):
        load_settings(_write(tmp_path, text))


def test_missing_file(tmp_path: Path) -> None:
    """Unreadable files are reported with their path."""
    with pytest.raises(ConfigLoadError, match="Failed to read settings file"):
        load_settings(tmp_path / "missing.yaml")
