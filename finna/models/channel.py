"""
Channel schemas.

Dependencies: pydantic
System role: Channel API contracts
"""

from pydantic import BaseModel, ConfigDict, Field


class ChannelItem(BaseModel):
    """One record in a channel."""

    title: str
    source: str
    thumbnail: str | bool = False
    id: str


class ChannelLink(BaseModel):
    label: str
    icon: str
    url: str


class Channel(BaseModel):
    """A titled list of records."""

    model_config = ConfigDict(populate_by_name=True)

    title: str
    provider_id: str = Field(alias="providerId")
    contents: list[ChannelItem] | None = Field(
        default=None, description="Records; missing when only a token is given"
    )
    token: str | None = Field(default=None, description="Token to load the contents later")
    links: list[ChannelLink] = Field(default_factory=list)


class RecordSummary(BaseModel):
    id: str
    source: str
    title: str


class ChannelsResponse(BaseModel):
    """Channels of one page context."""

    channels: list[Channel]
    token: str | None = None
    record: RecordSummary | None = None
    lookfor: str | None = None
    total: int | None = Field(default=None, description="Search result count")
