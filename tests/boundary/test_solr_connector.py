"""
Test suite for SolrConnector and SearchService.

System role: Verification of Solr request building and record wrapping
"""

import httpx
import pytest

from finna.boundary.solr.connector import SearchBackendError, SolrConnector, escape_phrase
from finna.core.search.search_service import (
    RecordMissingError,
    SearchService,
    UnsupportedSourceError,
)

DOCS = {
    "response": {
        "numFound": 2,
        "start": 0,
        "docs": [
            {"id": "fin.1", "title": "Kalevala", "thumbnail": "http://img/1.jpg"},
            {"id": "fin.2", "title_short": "Kanteletar"},
        ],
    }
}


class RecordingTransport:
    """Mock transport handler remembering requests."""

    def __init__(self, status_code: int = 200, payload: dict | None = None) -> None:
        self.status_code = status_code
        self.payload = payload if payload is not None else DOCS
        self.requests: list[httpx.Request] = []

    def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        return httpx.Response(self.status_code, json=self.payload)


def _connector(transport: RecordingTransport) -> SolrConnector:
    return SolrConnector(
        "http://solr:8983/solr/",
        "biblio",
        client=httpx.AsyncClient(transport=httpx.MockTransport(transport)),
    )


class TestSolrConnector:
    """Test suite for SolrConnector."""

    def test_escape_phrase(self) -> None:
        assert escape_phrase('a "b" \\c') == '"a \\"b\\" \\\\c"'

    @pytest.mark.asyncio
    async def test_search_sends_repeated_params(self) -> None:
        transport = RecordingTransport()
        connector = _connector(transport)

        result = await connector.search([("q", "*:*"), ("fq", "a:1"), ("fq", "b:2")])

        request = transport.requests[0]
        assert request.url.path == "/solr/biblio/select"
        assert request.url.params.get_list("fq") == ["a:1", "b:2"]
        assert request.url.params["wt"] == "json"
        assert result == DOCS
        await connector.close()

    @pytest.mark.asyncio
    async def test_retrieve_batch_without_ids_skips_request(self) -> None:
        transport = RecordingTransport()
        connector = _connector(transport)

        result = await connector.retrieve_batch([])

        assert result["response"]["docs"] == []
        assert transport.requests == []

    @pytest.mark.asyncio
    async def test_retrieve_batch_query(self) -> None:
        transport = RecordingTransport()
        connector = _connector(transport)

        await connector.retrieve_batch(["a", "b"])

        params = transport.requests[0].url.params
        assert params["q"] == 'id:("a" OR "b")'
        assert params["rows"] == "2"

    @pytest.mark.asyncio
    async def test_alphabetic_browse_offset(self) -> None:
        transport = RecordingTransport(payload={"Browse": {"items": []}})
        connector = _connector(transport)

        await connector.alphabetic_browse("lcc", "QA 76", 0, 20, "title:id", -10)

        request = transport.requests[0]
        assert request.url.path == "/solr/biblio/browse"
        assert request.url.params["offset"] == "-10"
        assert request.url.params["extras"] == "title:id"
        assert request.url.params["from"] == "QA 76"

    @pytest.mark.asyncio
    async def test_http_error_should_raise(self) -> None:
        connector = _connector(RecordingTransport(status_code=500, payload={}))

        with pytest.raises(SearchBackendError):
            await connector.search([("q", "*:*")])

    @pytest.mark.asyncio
    async def test_non_json_body_should_raise(self) -> None:
        connector = SolrConnector(
            "http://solr:8983/solr/",
            "biblio",
            client=httpx.AsyncClient(
                transport=httpx.MockTransport(lambda r: httpx.Response(200, text="<html>proxy error</html>"))
            ),
        )

        with pytest.raises(SearchBackendError):
            await connector.search([("q", "*:*")])

    @pytest.mark.asyncio
    async def test_ping(self) -> None:
        assert await _connector(RecordingTransport()).ping() is True
        assert await _connector(RecordingTransport(status_code=503, payload={})).ping() is False


class TestSearchService:
    """Test suite for SearchService."""

    @pytest.mark.asyncio
    async def test_run_wraps_records(self) -> None:
        transport = RecordingTransport()
        service = SearchService({"Solr": _connector(transport)})
        seen = []

        results = await service.run({"lookfor": "kalevala", "limit": "5"}, "Solr", seen.append)

        assert results.total == 2
        assert [r.unique_id for r in results.records] == ["fin.1", "fin.2"]
        assert results.records[1].title == "Kanteletar"
        assert results.records[0].thumbnail == "http://img/1.jpg"
        assert seen[0].lookfor == "kalevala"
        assert transport.requests[0].url.params["rows"] == "5"

    @pytest.mark.asyncio
    async def test_load_missing_record_should_raise(self) -> None:
        empty = {"response": {"numFound": 0, "docs": []}}
        service = SearchService({"Solr": _connector(RecordingTransport(payload=empty))})

        assert await service.retrieve("nope", "Solr") is None
        with pytest.raises(RecordMissingError):
            await service.load_record("nope", "Solr")

    @pytest.mark.asyncio
    async def test_unknown_source_should_raise(self) -> None:
        service = SearchService({})

        with pytest.raises(UnsupportedSourceError):
            await service.run({}, "Primo")
