"""
Channel loader.

Builds the channel lists shown on the home page, on a record page and for a
search. Which providers run is configured per search backend and context:

    source.Solr:
      home: [similaritems, "alphabrowse:my_browse_options"]

Dependencies: finna.core.channels, finna.core.search, finna.core.cache
System role: Channel orchestration
"""

import hashlib
import logging
from typing import Any

from finna.core.cache import CacheStorage
from finna.core.channels.base import ChannelProvider
from finna.core.channels.registry import ProviderRegistry
from finna.core.search.records import SearchParams, SearchResults
from finna.core.search.search_service import SearchService

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_BACKEND = "Solr"


class ChannelLoader:
    """Loads channel contexts for home, record and search pages."""

    def __init__(
        self,
        config: dict[str, Any],
        registry: ProviderRegistry,
        search_service: SearchService,
        cache: CacheStorage | None = None,
        locale: str = "",
    ) -> None:
        """
        Args:
            config: Channel configuration sections
            registry: Provider registry
            search_service: Search service used by the loader and providers
            cache: Home channel cache; caching is off when None or when
                General.cache_home_channels is false
            locale: Active locale, part of the home cache key
        """
        self.config = config
        self.registry = registry
        self.search_service = search_service
        self.cache = cache
        self.locale = locale

    @property
    def general(self) -> dict[str, Any]:
        return self.config.get("General") or {}

    def get_channel_provider(self, provider_id: str) -> ChannelProvider:
        """Create and configure the provider for an id like "name" or "name:section"."""
        service_name, _, config_section = provider_id.partition(":")
        if not config_section:
            config_section = f"provider.{service_name}"
        options = dict(self.config.get(config_section) or {})

        provider = self.registry.get(service_name, self.search_service)
        provider.set_provider_id(provider_id)
        provider.set_options(options)
        return provider

    def get_channel_providers(
        self, source: str, context: str, active_id: str | None = None
    ) -> list[ChannelProvider]:
        provider_ids = list((self.config.get(f"source.{source}") or {}).get(context) or [])
        if active_id and active_id in provider_ids:
            provider_ids = [active_id]
        return [self.get_channel_provider(pid) for pid in provider_ids]

    async def perform_channel_search(
        self,
        request: dict[str, Any],
        providers: list[ChannelProvider],
        source: str,
    ) -> SearchResults:
        def configure(params: SearchParams) -> None:
            for provider in providers:
                provider.configure_search_params(params)

        return await self.search_service.run(request, source, configure)

    async def get_channels_from_results(
        self,
        providers: list[ChannelProvider],
        results: SearchResults,
        token: str | None,
    ) -> list[dict]:
        channels: list[dict] = []
        for provider in providers:
            channels.extend(await provider.get_from_search(results, token))
        return channels

    def home_cache_key(self, providers: list[ChannelProvider], source: str, token: str | None) -> str:
        parts = [
            ",".join(p.provider_id for p in providers),
            source,
            token or "",
            self.locale,
        ]
        return hashlib.md5("-".join(parts).encode()).hexdigest()

    async def get_home_context(
        self,
        token: str | None = None,
        active_channel: str | None = None,
        active_source: str | None = None,
    ) -> dict[str, Any]:
        """
        Build the home page channels.

        Returns:
            dict: {"token", "channels"}
        """
        source = active_source or self.general.get("default_home_source") or DEFAULT_SEARCH_BACKEND
        providers = self.get_channel_providers(source, "home", active_channel)

        cache_key = None
        if self.cache is not None and self.general.get("cache_home_channels", False):
            cache_key = self.home_cache_key(providers, source, token)
            channels = self.cache.get_item(cache_key)
            if channels:
                logger.debug("Home channels served from cache", extra={"source": source})
                return {"token": token, "channels": channels}

        request: dict[str, Any] = {}
        if self.general.get("default_home_search"):
            request["lookfor"] = self.general["default_home_search"]
        results = await self.perform_channel_search(request, providers, source)
        channels = await self.get_channels_from_results(providers, results, token)

        if cache_key is not None:
            self.cache.set_item(cache_key, channels)
        return {"token": token, "channels": channels}

    async def get_record_context(
        self,
        record_id: str,
        token: str | None = None,
        active_channel: str | None = None,
        source: str = DEFAULT_SEARCH_BACKEND,
    ) -> dict[str, Any]:
        """
        Build the channels of one record.

        Returns:
            dict: {"driver", "channels", "token"}

        Raises:
            RecordMissingError: If the record does not exist
        """
        driver = await self.search_service.load_record(record_id, source)
        providers = self.get_channel_providers(source, "record", active_channel)

        channels: list[dict] = []
        for provider in providers:
            channels.extend(await provider.get_from_record(driver, token))
        return {"driver": driver, "channels": channels, "token": token}

    async def get_search_context(
        self,
        request: dict[str, Any] | None = None,
        token: str | None = None,
        active_channel: str | None = None,
        source: str = DEFAULT_SEARCH_BACKEND,
    ) -> dict[str, Any]:
        """
        Build the channels of a search.

        Returns:
            dict: {"results", "lookfor", "channels", "token"}
        """
        request = request or {}
        providers = self.get_channel_providers(source, "search", active_channel)
        results = await self.perform_channel_search(request, providers, source)
        channels = await self.get_channels_from_results(providers, results, token)
        return {
            "results": results,
            "lookfor": request.get("lookfor"),
            "channels": channels,
            "token": token,
        }
