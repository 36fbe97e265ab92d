"""
Channel provider registry.

Dependencies: finna.core.channels
System role: Provider name -> factory lookup
"""

from typing import Callable

from finna.core.channels.alpha_browse import AlphaBrowseProvider
from finna.core.channels.base import ChannelProvider
from finna.core.channels.similar_items import SimilarItemsProvider
from finna.core.search.search_service import SearchService

ProviderFactory = Callable[[SearchService], ChannelProvider]


class UnknownProviderError(KeyError):
    """Raised when a channel provider name is not registered."""


class ProviderRegistry:
    """Maps provider names used in channel configuration to factories."""

    def __init__(self) -> None:
        self._factories: dict[str, ProviderFactory] = {}

    def register(self, name: str, factory: ProviderFactory) -> None:
        self._factories[name.lower()] = factory

    def has(self, name: str) -> bool:
        return name.lower() in self._factories

    def get(self, name: str, search_service: SearchService) -> ChannelProvider:
        """
        Create a new provider instance.

        Raises:
            UnknownProviderError: If no factory is registered for the name
        """
        try:
            factory = self._factories[name.lower()]
        except KeyError:
            raise UnknownProviderError(name) from None
        return factory(search_service)


def default_registry() -> ProviderRegistry:
    """Registry with the built-in providers."""
    registry = ProviderRegistry()
    registry.register("alphabrowse", AlphaBrowseProvider)
    registry.register("similaritems", SimilarItemsProvider)
    return registry
