"""Boundary adapters: database, ILS, Solr and mail."""
