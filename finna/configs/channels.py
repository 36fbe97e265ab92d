"""
Channel configuration settings.

Points at the YAML file describing which channel providers are active per
search backend and context (home, record, search).

Dependencies: pydantic_settings, yaml
System role: Channel provider configuration
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_CONFIG_PATH = Path(__file__).parent / "channels.yaml"


class ChannelSettings(BaseSettings):
    """Channel loader configuration."""

    model_config = SettingsConfigDict(
        env_prefix="CHANNELS_",
        case_sensitive=False,
        extra="ignore",
    )

    config_path: str | None = Field(
        default=None,
        description="Path to channels.yaml; built-in defaults are used when unset",
    )
    cache_home_channels: bool = Field(
        default=False,
        description="Cache generated home page channels",
    )
    cache_ttl: int = Field(default=600, description="Home channel cache lifetime in seconds")

    def load_config(self) -> dict[str, Any]:
        """
        Load the channel configuration.

        Returns:
            dict: Sections such as "General", "source.Solr" and "provider.<name>"
        """
        path = Path(self.config_path) if self.config_path else DEFAULT_CONFIG_PATH
        with path.open("r", encoding="utf-8") as f:
            return yaml.safe_load(f) or {}
