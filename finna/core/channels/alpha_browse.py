"""
Alphabetic browse channel provider.

Shows the items shelved next to a record by browsing an alphabetic index
(call numbers by default) from the record's own heading.

Dependencies: finna.core.channels.base, finna.core.search
System role: "Nearby items" channels
"""

from typing import Any
from urllib.parse import urlencode

from finna.core.channels.base import (
    RecordBasedChannelProvider,
    record_channels_url,
    record_url,
)
from finna.core.search.records import RecordDriver


class AlphaBrowseProvider(RecordBasedChannelProvider):
    """Channel provider backed by the alphabetic browse handler."""

    def set_options(self, options: dict[str, Any]) -> None:
        self.channel_size = int(options.get("channelSize", 20))
        self.max_records_to_examine = int(options.get("maxRecordsToExamine", 2))
        self.browse_index = options.get("browseIndex", "lcc")
        self.solr_field = options.get("solrField", "callnumber-raw")
        self.rows_before = int(options.get("rows_before", 10))
        self.source = options.get("source", "Solr")
        self.title_template = options.get("title", "Nearby items: {title}")

    async def summarize_browse_details(self, details: dict) -> list[dict]:
        """
        Turn an alphabetic browse response into channel contents.

        Args:
            details: Browse response with Browse.items

        Returns:
            list[dict]: Channel contents with thumbnails where available
        """
        ids: list[str] = []
        results: list[dict] = []
        for item in (details.get("Browse") or {}).get("items") or []:
            extras = item.get("extras") or {}
            try:
                title = extras["title"][0][0]
                record_id = extras["id"][0][0]
            except (KeyError, IndexError, TypeError):
                continue
            ids.append(record_id)
            results.append(
                {
                    "title": title,
                    "source": self.source,
                    "thumbnail": False,
                    "id": record_id,
                }
            )

        if ids:
            records = await self.search_service.retrieve_batch(ids, self.source)
            thumbs = {r.unique_id: r.thumbnail for r in records if r.thumbnail}
            for current in results:
                if current["id"] in thumbs:
                    current["thumbnail"] = thumbs[current["id"]]
        return results

    async def build_channel_from_record(self, driver: RecordDriver, token_only: bool = False) -> dict:
        channel: dict[str, Any] = {
            "title": self.title_template.format(title=driver.breadcrumb),
            "providerId": self.provider_id,
            "links": [],
        }
        raw = driver.raw_data.get(self.solr_field)
        values = raw if isinstance(raw, list) else [raw]
        seed = values[0] if values else None

        if not seed:
            # No heading to browse from; a token would load nothing later
            channel["contents"] = []
        elif token_only:
            channel["token"] = driver.unique_id
        else:
            details = await self.search_service.alphabetic_browse(
                self.source,
                self.browse_index,
                seed,
                0,
                self.channel_size,
                "title:author:isbn:id",
                -self.rows_before,
            )
            channel["contents"] = await self.summarize_browse_details(details)
            channel["links"] = [
                {"label": "View Record", "icon": "fa-file-text-o", "url": record_url(driver)},
                {"label": "channel_expand", "icon": "fa-search-plus", "url": record_channels_url(driver)},
                {
                    "label": "channel_browse",
                    "icon": "fa-list",
                    "url": "/Alphabrowse/Home?" + urlencode({"source": self.browse_index, "from": seed}),
                },
            ]
        return channel
