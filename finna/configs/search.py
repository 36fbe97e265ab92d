"""
Search backend configuration settings.

Dependencies: pydantic, pydantic_settings
System role: Solr connection configuration
"""

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class SearchSettings(BaseSettings):
    """Solr index configuration."""

    model_config = SettingsConfigDict(
        env_prefix="SOLR_",
        case_sensitive=False,
        extra="ignore",
    )

    url: str = Field(default="http://localhost:8983/solr", description="Solr base URL")
    core: str = Field(default="biblio", description="Solr core holding bibliographic records")
    timeout: float = Field(default=30.0, description="HTTP timeout in seconds")
    default_backend: str = Field(default="Solr", description="Default search backend identifier")
