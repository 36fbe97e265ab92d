"""
Dependency injection container.

Factory functions for FastAPI dependencies. Long-lived objects (search
connectors, ILS drivers, theme info) live in ServiceCache; services bound to
a database session are created per request.

Dependencies: finna.configs, finna.application, finna.boundary, finna.core
System role: DI container for service injection
"""

from functools import lru_cache
from uuid import UUID

from fastapi import Depends, Header, HTTPException, status
from sqlalchemy.ext.asyncio import AsyncSession

from finna.application.services.payment_service import PaymentService
from finna.boundary.db import get_async_db
from finna.boundary.db.CRUD.user_crud import user_card_crud, user_crud
from finna.boundary.db.models.user_model import UserModel
from finna.boundary.ils.base import ILSError
from finna.boundary.ils.connection import ILSConnection
from finna.boundary.solr.connector import SolrConnector
from finna.configs import Settings, get_settings
from finna.core.cache import MemoryCache
from finna.core.channels.loader import ChannelLoader
from finna.core.channels.registry import default_registry
from finna.core.online_payment.manager import OnlinePaymentManager
from finna.core.search.search_service import SearchService
from finna.core.theme.theme_info import ThemeInfo


class ServiceCache:
    """Container for cached service instances."""

    def __init__(self):
        self._search_service = None
        self._ils = None
        self._payment_manager = None
        self._theme_info = None
        self._channel_config = None
        self._home_channel_cache = None

    @property
    def search_service(self) -> SearchService:
        """Get cached search service."""
        if self._search_service is None:
            settings = get_settings().search
            connector = SolrConnector(settings.url, settings.core, settings.timeout)
            self._search_service = SearchService({settings.default_backend: connector})
        return self._search_service

    @property
    def ils(self) -> ILSConnection:
        """Get cached ILS connection."""
        if self._ils is None:
            self._ils = ILSConnection.from_config(get_settings().ils.load_datasources())
        return self._ils

    @property
    def payment_manager(self) -> OnlinePaymentManager:
        """Get cached online payment manager."""
        if self._payment_manager is None:
            datasources = get_settings().online_payment.load_datasources()
            self._payment_manager = OnlinePaymentManager(datasources)
        return self._payment_manager

    @property
    def theme_info(self) -> ThemeInfo:
        """Get cached theme info with the configured theme active."""
        if self._theme_info is None:
            settings = get_settings().theme
            theme_info = ThemeInfo(settings.base_dir, settings.safe_theme)
            theme_info.set_cache(MemoryCache())
            if settings.theme:
                theme_info.set_theme(settings.theme)
            self._theme_info = theme_info
        return self._theme_info

    @property
    def channel_config(self) -> dict:
        """Get channel configuration, with the home cache switch from settings applied."""
        if self._channel_config is None:
            settings = get_settings().channels
            config = settings.load_config()
            if settings.cache_home_channels:
                config.setdefault("General", {})["cache_home_channels"] = True
            self._channel_config = config
        return self._channel_config

    @property
    def home_channel_cache(self) -> MemoryCache:
        if self._home_channel_cache is None:
            self._home_channel_cache = MemoryCache(ttl=get_settings().channels.cache_ttl)
        return self._home_channel_cache

    async def close(self) -> None:
        """Close HTTP clients held by cached services."""
        if self._search_service is not None:
            for connector in self._search_service.connectors.values():
                await connector.close()

    def clear(self) -> None:
        """Clear all cached instances."""
        self._search_service = None
        self._ils = None
        self._payment_manager = None
        self._theme_info = None
        self._channel_config = None
        self._home_channel_cache = None


# Global service cache
_service_cache = ServiceCache()


def get_service_cache() -> ServiceCache:
    """Get service cache singleton."""
    return _service_cache


@lru_cache
def get_settings_dependency() -> Settings:
    """Get settings singleton."""
    return get_settings()


def get_search_service() -> SearchService:
    return get_service_cache().search_service


def get_ils() -> ILSConnection:
    return get_service_cache().ils


def get_payment_manager() -> OnlinePaymentManager:
    return get_service_cache().payment_manager


def get_theme_info() -> ThemeInfo:
    return get_service_cache().theme_info


def get_channel_loader(
    search_service: SearchService = Depends(get_search_service),
    accept_language: str | None = Header(default=None),
) -> ChannelLoader:
    """
    Get channel loader for the request locale.

    Args:
        search_service: Injected search service
        accept_language: Accept-Language header; first language is the locale

    Returns:
        ChannelLoader: Loader sharing the home channel cache
    """
    locale = (accept_language or "").split(",")[0].strip()
    cache = get_service_cache()
    return ChannelLoader(
        cache.channel_config,
        default_registry(),
        search_service,
        cache.home_channel_cache,
        locale,
    )


def get_payment_service(
    db: AsyncSession = Depends(get_async_db),
    ils: ILSConnection = Depends(get_ils),
    manager: OnlinePaymentManager = Depends(get_payment_manager),
) -> PaymentService:
    """
    Get payment service instance.

    Args:
        db: Async database session (injected via Depends)
        ils: ILS connection
        manager: Payment handler manager

    Returns:
        PaymentService: Payment service instance
    """
    return PaymentService(db, ils, manager, get_settings().online_payment)


async def get_current_user(
    x_user_id: str | None = Header(default=None),
    db: AsyncSession = Depends(get_async_db),
) -> UserModel:
    """
    Resolve the user making the request.

    Authentication happens in front of this service, which passes the user
    id in the X-User-Id header.

    Raises:
        HTTPException(401): Header missing, malformed or unknown user
    """
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Login required")
    try:
        user_id = UUID(x_user_id)
    except ValueError:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Invalid user id")
    user = await user_crud.get_by_id(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail="Unknown user")
    return user


async def get_patron(
    source: str,
    user: UserModel,
    db: AsyncSession,
    ils: ILSConnection,
) -> dict:
    """
    Log in the user's library card for a datasource.

    Raises:
        HTTPException(404): The user has no card for the datasource
        HTTPException(403): The ILS rejected the card credentials
    """
    card = await user_card_crud.get_by_source(db, user.id, source)
    if card is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="No library card for source")
    try:
        patron = await ils.patron_login(card.cat_username, card.cat_password)
    except ILSError as e:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(e))
    if patron is None:
        raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail="Library card login failed")
    return patron
