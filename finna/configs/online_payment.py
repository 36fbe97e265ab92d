"""
Online payment configuration settings.

Holds global payment settings and loads the per-datasource handler
configuration from YAML. Each top-level key in the YAML file is an ILS
datasource (e.g. "helmet") mapping to its handler options.

Dependencies: pydantic_settings, yaml
System role: Online payment configuration
"""

from pathlib import Path
from typing import Any

import yaml
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class OnlinePaymentSettings(BaseSettings):
    """Online payment configuration."""

    model_config = SettingsConfigDict(
        env_prefix="ONLINE_PAYMENT_",
        case_sensitive=False,
        extra="ignore",
    )

    config_path: str | None = Field(
        default=None,
        description="Path to per-datasource online payment YAML",
    )
    transaction_max_duration: int = Field(
        default=30,
        description="Minutes after which an unfinished transaction is considered abandoned",
    )
    minimum_paid_age: int = Field(
        default=120,
        description="Seconds before a paid, unregistered transaction is retried",
    )

    def load_datasources(self) -> dict[str, dict[str, Any]]:
        """
        Load per-datasource payment configuration.

        Returns:
            dict: Datasource name -> handler options (empty if no file configured)
        """
        if not self.config_path:
            return {}
        path = Path(self.config_path)
        if not path.exists():
            return {}
        with path.open("r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        return {str(k): dict(v or {}) for k, v in data.items()}
