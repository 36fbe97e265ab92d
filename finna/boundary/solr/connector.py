"""
Solr HTTP connector.

Thin async client for the Solr select and browse request handlers.
Returns decoded JSON; record wrapping happens in finna.core.search.

Dependencies: httpx
System role: Search index access
"""

import logging
from typing import Any, Iterable

import httpx

logger = logging.getLogger(__name__)

# Fields used by the MoreLikeThis query parser for similar items
SIMILAR_FIELDS = "title,title_short,callnumber-label,topic,language,author,publishDate"


class SearchBackendError(Exception):
    """Raised when Solr cannot be reached or returns an error."""


def escape_phrase(value: str) -> str:
    """Quote a value for use as a Solr phrase."""
    return '"' + value.replace("\\", "\\\\").replace('"', '\\"') + '"'


class SolrConnector:
    """Async Solr client bound to one core."""

    def __init__(
        self,
        url: str,
        core: str = "biblio",
        timeout: float = 30.0,
        client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize connector.

        Args:
            url: Solr base URL (without core)
            core: Core name
            timeout: Request timeout in seconds
            client: Preconfigured httpx client (tests inject a MockTransport)
        """
        self.base_url = f"{url.rstrip('/')}/{core}"
        self._client = client or httpx.AsyncClient(timeout=timeout)

    async def close(self) -> None:
        """Close the underlying HTTP client."""
        await self._client.aclose()

    async def _request(self, handler: str, params: list[tuple[str, Any]]) -> dict:
        url = f"{self.base_url}/{handler}"
        params = [*params, ("wt", "json")]
        try:
            response = await self._client.get(url, params=params)
            response.raise_for_status()
        except httpx.HTTPStatusError as e:
            logger.error(
                "Solr request failed",
                extra={"url": url, "status_code": e.response.status_code},
            )
            raise SearchBackendError(
                f"Solr returned HTTP {e.response.status_code} for {handler}"
            ) from e
        except httpx.RequestError as e:
            logger.error("Solr unreachable", extra={"url": url, "error": str(e)})
            raise SearchBackendError(f"Solr request to {handler} failed: {e}") from e
        try:
            return response.json()
        except ValueError as e:
            logger.error("Solr returned invalid JSON", extra={"url": url})
            raise SearchBackendError(f"Solr returned an invalid response for {handler}") from e

    async def search(self, params: list[tuple[str, Any]]) -> dict:
        """
        Run a select query.

        Args:
            params: Solr parameters as (name, value) pairs; repeated names allowed

        Returns:
            dict: Decoded Solr response
        """
        return await self._request("select", params)

    async def retrieve(self, record_id: str) -> dict:
        """Fetch a single record by id."""
        return await self._request("select", [("q", f"id:{escape_phrase(record_id)}"), ("rows", 1)])

    async def retrieve_batch(self, record_ids: Iterable[str]) -> dict:
        """Fetch several records by id in one request."""
        ids = list(record_ids)
        if not ids:
            return {"response": {"numFound": 0, "start": 0, "docs": []}}
        query = "id:(" + " OR ".join(escape_phrase(i) for i in ids) + ")"
        return await self._request("select", [("q", query), ("rows", len(ids))])

    async def similar(self, record_id: str, rows: int = 20) -> dict:
        """Fetch records similar to the given one (MoreLikeThis)."""
        query = f"{{!mlt qf={SIMILAR_FIELDS} mintf=1 mindf=1}}{record_id}"
        return await self._request("select", [("q", query), ("rows", rows)])

    async def alphabetic_browse(
        self,
        source: str,
        from_value: str,
        page: int = 0,
        limit: int = 20,
        extras: str | None = None,
        offset_delta: int = 0,
    ) -> dict:
        """
        Query the alphabetic browse handler.

        Args:
            source: Browse index name (e.g. "lcc")
            from_value: Heading to start browsing from
            page: Page number
            limit: Rows per page
            extras: Colon-separated extra fields to return per heading
            offset_delta: Rows to shift the window (negative shows preceding rows)

        Returns:
            dict: Decoded response with a "Browse" section
        """
        offset = page * limit + offset_delta
        params: list[tuple[str, Any]] = [
            ("from", from_value),
            ("source", source),
            ("rows", limit),
            ("offset", offset),
            ("json.nl", "arrarr"),
        ]
        if extras:
            params.append(("extras", extras))
        return await self._request("browse", params)

    async def ping(self) -> bool:
        """Check that the core answers."""
        try:
            await self._request("admin/ping", [])
        except SearchBackendError:
            return False
        return True
