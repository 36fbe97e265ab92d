"""
Settings aggregate.

Groups the per-concern settings classes under one object so callers write
`get_settings().online_payment.minimum_paid_age` and friends.

Dependencies: pydantic_settings, finna.configs.*
System role: Central configuration aggregator for the application
"""

from functools import lru_cache

from pydantic import Field

from finna.configs.base import BaseSettings
from finna.configs.channels import ChannelSettings
from finna.configs.database import DatabaseSettings
from finna.configs.ils import ILSSettings
from finna.configs.mail import MailSettings
from finna.configs.online_payment import OnlinePaymentSettings
from finna.configs.search import SearchSettings
from finna.configs.theme import ThemeSettings


class Settings(BaseSettings):
    """Every configuration section of the service."""

    database: DatabaseSettings = Field(default_factory=DatabaseSettings)
    search: SearchSettings = Field(default_factory=SearchSettings)
    channels: ChannelSettings = Field(default_factory=ChannelSettings)
    theme: ThemeSettings = Field(default_factory=ThemeSettings)
    ils: ILSSettings = Field(default_factory=ILSSettings)
    online_payment: OnlinePaymentSettings = Field(default_factory=OnlinePaymentSettings)
    mail: MailSettings = Field(default_factory=MailSettings)


@lru_cache
def get_settings() -> Settings:
    """Settings are read from the environment once per process."""
    return Settings()
