"""Load and save config.yaml and sites.json."""

from __future__ import annotations

from pathlib import Path

import yaml
from pydantic import ValidationError

from phppark_common import GlobalSettings, SiteRegistry

from phppark.errors import ParseError, StorageError


def _read(path: Path, what: str) -> str:
    try:
        return path.read_text()
    except OSError as exc:
        raise StorageError(f"Failed to read {what} {path}: {exc}") from exc


def _write(path: Path, content: str, what: str) -> None:
    try:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(content)
    except OSError as exc:
        raise StorageError(f"Failed to write {what} {path}: {exc}") from exc


def load_settings(path: Path) -> GlobalSettings:
    """Load global settings; defaults when the file does not exist."""
    if not path.exists():
        return GlobalSettings()
    text = _read(path, "config file")
    try:
        data = yaml.safe_load(text) or {}
    except yaml.YAMLError as exc:
        raise ParseError(f"Failed to parse config file {path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ParseError(f"Failed to parse config file {path}: expected a mapping")
    try:
        return GlobalSettings.model_validate(data)
    except ValidationError as exc:
        raise ParseError(f"Invalid config file {path}:\n{exc}") from exc


def save_settings(path: Path, settings: GlobalSettings) -> None:
    content = yaml.safe_dump(settings.model_dump(mode="json"), sort_keys=False)
    _write(path, content, "config file")


def load_sites(path: Path) -> SiteRegistry:
    """Load the site registry; empty when the file does not exist."""
    if not path.exists():
        return SiteRegistry()
    text = _read(path, "sites file")
    try:
        return SiteRegistry.model_validate_json(text)
    except ValidationError as exc:
        raise ParseError(f"Failed to parse sites file {path}:\n{exc}") from exc


def save_sites(path: Path, registry: SiteRegistry) -> None:
    """Persist the whole registry (no incremental writes)."""
    content = registry.model_dump_json(indent=2, exclude_none=True)
    _write(path, content + "\n", "sites file")
