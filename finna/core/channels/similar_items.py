"""
Similar items channel provider.

Dependencies: finna.core.channels.base
System role: "Similar items" channels based on MoreLikeThis
"""

from typing import Any

from finna.core.channels.base import (
    RecordBasedChannelProvider,
    record_channels_url,
    record_url,
)
from finna.core.search.records import RecordDriver


class SimilarItemsProvider(RecordBasedChannelProvider):
    """Channel of records similar to a seed record."""

    def set_options(self, options: dict[str, Any]) -> None:
        self.channel_size = int(options.get("channelSize", 20))
        self.max_records_to_examine = int(options.get("maxRecordsToExamine", 2))
        self.title_template = options.get("title", "Similar items: {title}")

    async def build_channel_from_record(self, driver: RecordDriver, token_only: bool = False) -> dict:
        channel: dict[str, Any] = {
            "title": self.title_template.format(title=driver.breadcrumb),
            "providerId": self.provider_id,
            "links": [],
        }
        if token_only:
            channel["token"] = driver.unique_id
            return channel

        similar = await self.search_service.similar(driver.unique_id, driver.source, self.channel_size)
        channel["contents"] = self.summarize_records(similar)
        channel["links"] = [
            {"label": "View Record", "icon": "fa-file-text-o", "url": record_url(driver)},
            {"label": "channel_expand", "icon": "fa-search-plus", "url": record_channels_url(driver)},
        ]
        return channel
