"""
SMTP configuration settings.

Dependencies: pydantic_settings
System role: Outgoing mail configuration for payment reports
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class MailSettings(BaseSettings):
    """SMTP server configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SMTP_",
        case_sensitive=False,
        extra="ignore",
    )

    host: str = Field(default="localhost", description="SMTP host")
    port: int = Field(default=25, description="SMTP port")
    username: str | None = Field(default=None, description="SMTP username")
    password: str | None = Field(default=None, description="SMTP password")
    use_tls: bool = Field(default=False, description="Use implicit TLS")
    from_address: str = Field(default="noreply@finna.fi", description="Default sender")
