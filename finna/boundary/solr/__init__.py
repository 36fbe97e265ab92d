"""Solr search index boundary."""

from finna.boundary.solr.connector import SearchBackendError, SolrConnector

__all__ = ["SolrConnector", "SearchBackendError"]
