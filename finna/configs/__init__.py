"""
Service configuration.

Environment variables (and .env) map onto pydantic-settings classes, one per
concern, gathered by Settings.
"""

from finna.configs.settings import Settings, get_settings

__all__ = ["Settings", "get_settings"]
