"""
Database configuration settings.

Transactions, users and library cards live in PostgreSQL in production.
DATABASE_URL overrides the assembled URL, e.g. for a local SQLite file.

Dependencies: pydantic, pydantic_settings
System role: Database connection configuration for ORM
"""

from pydantic import Field
from pydantic_settings import SettingsConfigDict

from finna.configs.base import BaseSettings


class DatabaseSettings(BaseSettings):
    """PostgreSQL connection configuration."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POSTGRES_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str | None = Field(
        default=None,
        validation_alias="DATABASE_URL",
        description="Complete async SQLAlchemy URL; overrides the fields below",
    )
    host: str = Field(default="localhost", description="PostgreSQL host")
    port: int = Field(default=5432, description="PostgreSQL port")
    user: str = Field(default="finna", description="PostgreSQL user")
    password: str = Field(default="finna", description="PostgreSQL password")
    db: str = Field(default="finna", description="PostgreSQL database name")
    pool_size: int = Field(default=5, description="Connection pool size")
    max_overflow: int = Field(default=10, description="Connections allowed beyond pool_size")
    echo_sql: bool = Field(default=False, description="Log emitted SQL")
    require_ssl: bool = Field(default=False, description="Require TLS to the server")

    @property
    def async_database_url(self) -> str:
        """SQLAlchemy URL for the asyncpg driver, or DATABASE_URL when set."""
        if self.url:
            return self.url
        query = "?ssl=require" if self.require_ssl else ""
        return (
            f"postgresql+asyncpg://{self.user}:{self.password}"
            f"@{self.host}:{self.port}/{self.db}{query}"
        )

    @property
    def is_sqlite(self) -> bool:
        return self.async_database_url.startswith("sqlite")
