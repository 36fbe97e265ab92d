"""
Search service.

Runs searches against the Solr connector and wraps documents as
RecordDriver objects.

Dependencies: finna.boundary.solr
System role: Search orchestration for channels and API
"""

import logging
from typing import Any, Callable

from finna.boundary.solr.connector import SolrConnector
from finna.core.search.records import RecordDriver, SearchParams, SearchResults

logger = logging.getLogger(__name__)


class RecordMissingError(Exception):
    """Raised when a record id is not found in the index."""

    def __init__(self, record_id: str, source: str = "Solr") -> None:
        self.record_id = record_id
        self.source = source
        super().__init__(f"Record {source}:{record_id} does not exist")


class UnsupportedSourceError(Exception):
    """Raised for a search backend that is not configured."""


def _facets(raw: dict) -> dict[str, list[tuple[str, int]]]:
    fields = (raw.get("facet_counts") or {}).get("facet_fields") or {}
    facets = {}
    for name, values in fields.items():
        # Solr flat list: [value1, count1, value2, count2, ...]
        facets[name] = [(str(values[i]), int(values[i + 1])) for i in range(0, len(values) - 1, 2)]
    return facets


class SearchService:
    """Executes searches and record lookups for the configured backends."""

    def __init__(self, connectors: dict[str, SolrConnector]) -> None:
        """
        Initialize search service.

        Args:
            connectors: Backend identifier -> connector
        """
        self.connectors = connectors

    def _connector(self, source: str) -> SolrConnector:
        try:
            return self.connectors[source]
        except KeyError:
            raise UnsupportedSourceError(f"Unsupported search backend: {source}") from None

    def _records(self, raw: dict, source: str) -> list[RecordDriver]:
        docs = (raw.get("response") or {}).get("docs") or []
        return [RecordDriver(raw_data=doc, source=source) for doc in docs]

    async def run(
        self,
        request: dict[str, Any],
        source: str,
        configure: Callable[[SearchParams], None] | None = None,
    ) -> SearchResults:
        """
        Run a search.

        Args:
            request: Request parameters (lookfor, filter, limit, offset, sort)
            source: Search backend identifier
            configure: Callback that may adjust the params before searching

        Returns:
            SearchResults
        """
        params = SearchParams.from_request(request)
        if configure is not None:
            configure(params)

        raw = await self._connector(source).search(params.to_solr())
        records = self._records(raw, source)
        total = int((raw.get("response") or {}).get("numFound", len(records)))
        logger.debug("Search completed", extra={"source": source, "total": total})
        return SearchResults(
            records=records,
            total=total,
            params=params,
            source=source,
            facets=_facets(raw),
        )

    async def retrieve(self, record_id: str, source: str) -> RecordDriver | None:
        """Fetch one record, or None if missing."""
        raw = await self._connector(source).retrieve(record_id)
        records = self._records(raw, source)
        return records[0] if records else None

    async def load_record(self, record_id: str, source: str) -> RecordDriver:
        """
        Fetch one record.

        Raises:
            RecordMissingError: If the record does not exist
        """
        record = await self.retrieve(record_id, source)
        if record is None:
            raise RecordMissingError(record_id, source)
        return record

    async def retrieve_batch(self, record_ids: list[str], source: str) -> list[RecordDriver]:
        raw = await self._connector(source).retrieve_batch(record_ids)
        return self._records(raw, source)

    async def similar(self, record_id: str, source: str, rows: int = 20) -> list[RecordDriver]:
        raw = await self._connector(source).similar(record_id, rows)
        return self._records(raw, source)

    async def alphabetic_browse(
        self,
        source: str,
        index: str,
        from_value: str,
        page: int = 0,
        limit: int = 20,
        extras: str | None = None,
        offset_delta: int = 0,
    ) -> dict:
        return await self._connector(source).alphabetic_browse(
            index, from_value, page, limit, extras, offset_delta
        )
