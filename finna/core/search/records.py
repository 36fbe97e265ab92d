"""
Search records and result sets.

Dependencies: dataclasses
System role: Backend-neutral view of Solr documents
"""

from dataclasses import dataclass, field
from typing import Any


@dataclass
class RecordDriver:
    """
    Wraps one raw index document.

    Attributes:
        raw_data: Document fields as returned by the index
        source: Search backend identifier (e.g. "Solr")
    """

    raw_data: dict[str, Any]
    source: str = "Solr"

    @property
    def unique_id(self) -> str:
        return str(self.raw_data.get("id", ""))

    @property
    def title(self) -> str:
        value = self.raw_data.get("title") or self.raw_data.get("title_short") or ""
        if isinstance(value, list):
            value = value[0] if value else ""
        return str(value)

    @property
    def breadcrumb(self) -> str:
        """Short title used in headings."""
        value = self.raw_data.get("title_short") or self.title
        if isinstance(value, list):
            value = value[0] if value else ""
        return str(value)

    @property
    def thumbnail(self) -> str | None:
        value = self.raw_data.get("thumbnail")
        if isinstance(value, list):
            value = value[0] if value else None
        return value or None


@dataclass
class SearchParams:
    """Mutable search request; channel providers adjust it before the search runs."""

    lookfor: str = ""
    filters: list[str] = field(default_factory=list)
    limit: int = 20
    offset: int = 0
    sort: str | None = None
    facets: list[str] = field(default_factory=list)
    facet_limit: int = 30

    @classmethod
    def from_request(cls, request: dict[str, Any]) -> "SearchParams":
        filters = request.get("filter") or []
        if isinstance(filters, str):
            filters = [filters]
        return cls(
            lookfor=str(request.get("lookfor") or ""),
            filters=list(filters),
            limit=int(request.get("limit") or 20),
            offset=int(request.get("offset") or 0),
            sort=request.get("sort"),
        )

    def to_solr(self) -> list[tuple[str, Any]]:
        """Convert to Solr select parameters."""
        params: list[tuple[str, Any]] = [
            ("q", self.lookfor or "*:*"),
            ("rows", self.limit),
            ("start", self.offset),
        ]
        params.extend(("fq", f) for f in self.filters)
        if self.sort:
            params.append(("sort", self.sort))
        if self.facets:
            params.append(("facet", "true"))
            params.append(("facet.limit", self.facet_limit))
            params.extend(("facet.field", f) for f in self.facets)
        return params


@dataclass
class SearchResults:
    """Records returned for one search."""

    records: list[RecordDriver]
    total: int
    params: SearchParams
    source: str = "Solr"
    facets: dict[str, list[tuple[str, int]]] = field(default_factory=dict)
