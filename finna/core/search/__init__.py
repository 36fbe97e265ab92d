"""Search records, parameters and service."""

from finna.core.search.records import RecordDriver, SearchParams, SearchResults
from finna.core.search.search_service import (
    RecordMissingError,
    SearchService,
    UnsupportedSourceError,
)

__all__ = [
    "RecordDriver",
    "SearchParams",
    "SearchResults",
    "SearchService",
    "RecordMissingError",
    "UnsupportedSourceError",
]
