"""
Channel provider base class.

A channel is a dict rendered as one carousel of records:

    {
        "title": str,
        "providerId": str,
        "contents": [{"title", "source", "thumbnail", "id"}, ...],
        "links": [{"label", "icon", "url"}, ...],
        "token": str,   # only when contents are deferred
    }

Dependencies: finna.core.search
System role: Contract for channel providers
"""

from abc import ABC, abstractmethod
from typing import Any
from urllib.parse import quote, urlencode

from finna.core.search.records import RecordDriver, SearchParams, SearchResults
from finna.core.search.search_service import SearchService


def record_url(driver: RecordDriver) -> str:
    """Public URL of a record page."""
    return f"/Record/{quote(driver.unique_id, safe='')}"


def record_channels_url(driver: RecordDriver) -> str:
    """URL that expands a record into its own channel page."""
    return "/Channels/Record?" + urlencode({"id": driver.unique_id, "source": driver.source})


class ChannelProvider(ABC):
    """Base class for channel providers."""

    def __init__(self, search_service: SearchService, options: dict[str, Any] | None = None) -> None:
        self.search_service = search_service
        self.provider_id = ""
        self.set_options(options or {})

    def set_provider_id(self, provider_id: str) -> None:
        """Set the configured id ("name" or "name:section") of this provider."""
        self.provider_id = provider_id

    @abstractmethod
    def set_options(self, options: dict[str, Any]) -> None:
        """Apply provider options."""

    def configure_search_params(self, params: SearchParams) -> None:
        """Hook to adjust search parameters before a channel search runs."""

    @abstractmethod
    async def get_from_search(self, results: SearchResults, token: str | None = None) -> list[dict]:
        """Return channels derived from a search result set."""

    @abstractmethod
    async def get_from_record(self, driver: RecordDriver, token: str | None = None) -> list[dict]:
        """Return channels derived from a single record."""

    def summarize_records(self, records: list[RecordDriver]) -> list[dict]:
        """Convert records to channel contents."""
        return [
            {
                "title": record.title,
                "source": record.source,
                "thumbnail": record.thumbnail or False,
                "id": record.unique_id,
            }
            for record in records
        ]


class RecordBasedChannelProvider(ChannelProvider):
    """
    Provider that builds one channel per record.

    The first max_records_to_examine records of a search get full channels;
    later ones only get a token so the client can load them on demand.
    """

    max_records_to_examine = 2

    async def get_from_record(self, driver: RecordDriver, token: str | None = None) -> list[dict]:
        # A token that doesn't match the record can't produce results
        if token is not None and token != driver.unique_id:
            return []
        channel = await self.build_channel_from_record(driver)
        return [channel] if channel["contents"] else []

    async def get_from_search(self, results: SearchResults, token: str | None = None) -> list[dict]:
        driver = None
        channels: list[dict] = []
        for driver in results.records:
            if token is not None and token != driver.unique_id:
                continue
            token_only = len(channels) >= self.max_records_to_examine
            channel = await self.build_channel_from_record(driver, token_only)
            if "token" in channel or channel["contents"]:
                channels.append(channel)

        # The requested record may not be in this result page
        if not channels and driver is not None and token is not None:
            record = await self.search_service.retrieve(token, driver.source)
            if record is not None:
                channels.append(await self.build_channel_from_record(record))
        return channels

    @abstractmethod
    async def build_channel_from_record(self, driver: RecordDriver, token_only: bool = False) -> dict:
        """Build a channel (or a token placeholder) for one record."""
