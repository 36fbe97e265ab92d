"""Finna discovery backend."""
