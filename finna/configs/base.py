"""
Application-wide settings.

Values shared by the API process and the payment monitor command: the
deployment environment, log verbosity and allowed browser origins.

Dependencies: pydantic_settings
System role: Shared configuration inherited by the settings aggregate
"""

from pydantic import Field
from pydantic_settings import BaseSettings as PydanticBaseSettings, SettingsConfigDict


class BaseSettings(PydanticBaseSettings):
    """Settings read from the process environment and .env."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    environment: str = Field(
        default="development",
        description="Deployment name (development, test, production)",
    )
    log_level: str = Field(
        default="INFO",
        description="Root log level name",
    )
    cors_origins: list[str] = Field(
        default=["*"],
        description="Origins allowed to call the API from a browser",
    )
