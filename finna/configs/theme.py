"""
Theme configuration settings.

Dependencies: pydantic_settings
System role: Theme directory and selection
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class ThemeSettings(BaseSettings):
    """Theme selection configuration."""

    model_config = SettingsConfigDict(
        env_prefix="THEME_",
        case_sensitive=False,
        extra="ignore",
    )

    base_dir: str = Field(default="themes", description="Directory containing theme folders")
    safe_theme: str = Field(default="root", description="Theme guaranteed to exist")
    theme: str | None = Field(default=None, description="Active theme (safe theme when unset)")
