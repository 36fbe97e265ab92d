"""
ILS configuration settings.

The YAML file maps each datasource to its driver settings:

    helmet:
      driver: Demo
      patrons:
        "12345": {password: secret, fines: [...]}

Dependencies: pydantic_settings, yaml
System role: Library system datasource configuration
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ILSSettings(BaseSettings):
    """ILS datasource configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ILS_",
        case_sensitive=False,
        extra="ignore",
    )

    config_path: str | None = Field(default=None, description="Path to ILS datasources YAML")

    def load_datasources(self) -> dict[str, dict[str, Any]]:
        """Load datasource -> driver settings (empty if no file configured)."""
        if not self.config_path or not Path(self.config_path).exists():
            return {}
        with open(self.config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return {str(k): dict(v or {}) for k, v in data.items()}
