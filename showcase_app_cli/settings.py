"""Settings management for showcase-app-cli.

Simple, scope-aware YAML settings. The ``catalog`` section configures where
the model menu loads its data from.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel
from pydantic import Field

from .catalog.models import FallbackObject
from .paths import get_data_dir
from .paths import get_showcase_home

logger = logging.getLogger(__name__)

REMOTE_URL_ENV = "SHOWCASE_REMOTE_URL"
STORAGE_SAS_ENV = "SHOWCASE_STORAGE_SAS"


class StorageSettings(BaseModel):
    """Remote storage container holding converted models."""

    account_url: str = ""
    container: str = ""
    sas_token: str = ""
    index_file: str = "models.xml"

    @property
    def configured(self) -> bool:
        return bool(self.account_url and self.container)


class CatalogSettings(BaseModel):
    """Model menu data sources, read once per resolution."""

    override_file_name: str = Field(default="models.xml", description="Override file in the data directory")
    query_remote_storage: bool = Field(default=True, description="Query the storage container for models")
    remote_url: str = Field(default="", description="URL of a remote catalog index file")
    fallback_file_name: str = Field(default="models.fallback.xml", description="Fallback file in the data directory")
    fallback_data: list[FallbackObject] = Field(default_factory=list, description="Last-resort model list")
    data_dir: Path | None = Field(default=None, description="Directory holding override and fallback files")
    storage: StorageSettings = Field(default_factory=StorageSettings)

    @property
    def resolved_data_dir(self) -> Path:
        return self.data_dir if self.data_dir is not None else get_data_dir()

    @property
    def override_file_path(self) -> Path:
        return self.resolved_data_dir / self.override_file_name

    @property
    def fallback_file_path(self) -> Path:
        return self.resolved_data_dir / self.fallback_file_name


@dataclass
class SettingsPaths:
    """Standard paths for settings files."""

    global_settings: Path
    project_settings: Path
    local_settings: Path

    @classmethod
    def default(cls) -> SettingsPaths:
        """Create default paths for standard showcase layout."""
        return cls(
            global_settings=get_showcase_home() / "settings.yaml",
            project_settings=Path.cwd() / ".showcase" / "settings.yaml",
            local_settings=Path.cwd() / ".showcase" / "settings.local.yaml",
        )


class AppSettings:
    """Settings manager with scope-aware merging.

    Scope priority (most specific wins):
    1. local (.showcase/settings.local.yaml) - gitignored, machine-specific
    2. project (.showcase/settings.yaml) - committed, team-shared
    3. global (~/.showcase/settings.yaml) - user defaults

    Usage:
        settings = AppSettings()
        catalog = settings.get_catalog_settings()
    """

    def __init__(self, paths: SettingsPaths | None = None) -> None:
        self.paths = paths or SettingsPaths.default()

    def get_merged_settings(self) -> dict[str, Any]:
        """Load and merge settings from all scopes."""
        result: dict[str, Any] = {}
        for path in [self.paths.global_settings, self.paths.project_settings, self.paths.local_settings]:
            if not path.exists():
                continue
            try:
                with open(path, encoding="utf-8") as f:
                    content = yaml.safe_load(f) or {}
            except (OSError, yaml.YAMLError) as e:
                logger.warning(f"Skipping malformed settings file {path}: {e}")
                continue
            if not isinstance(content, dict):
                logger.warning(f"Skipping settings file {path}: expected a mapping")
                continue
            result = deep_merge(result, content)
        return result

    def get_catalog_settings(self) -> CatalogSettings:
        """Build catalog settings from merged scopes and environment overrides."""
        section = dict(self.get_merged_settings().get("catalog") or {})

        if remote_url := os.getenv(REMOTE_URL_ENV):
            section["remote_url"] = remote_url
        if sas_token := os.getenv(STORAGE_SAS_ENV):
            section["storage"] = {**(section.get("storage") or {}), "sas_token": sas_token}

        return CatalogSettings.model_validate(section)


def deep_merge(base: dict[str, Any], overlay: dict[str, Any]) -> dict[str, Any]:
    """Deep merge two dicts, overlay values win. Lists are replaced, not merged."""
    result = base.copy()
    for key, value in overlay.items():
        if key in result and isinstance(result[key], dict) and isinstance(value, dict):
            result[key] = deep_merge(result[key], value)
        else:
            result[key] = value
    return result
