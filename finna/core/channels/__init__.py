"""Channel providers and loader."""

from finna.core.channels.alpha_browse import AlphaBrowseProvider
from finna.core.channels.base import ChannelProvider
from finna.core.channels.loader import ChannelLoader
from finna.core.channels.registry import ProviderRegistry, UnknownProviderError, default_registry
from finna.core.channels.similar_items import SimilarItemsProvider

__all__ = [
    "AlphaBrowseProvider",
    "ChannelLoader",
    "ChannelProvider",
    "ProviderRegistry",
    "SimilarItemsProvider",
    "UnknownProviderError",
    "default_registry",
]
