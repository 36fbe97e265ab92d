"""
Channel API endpoints.

Routes:
- GET /channels/home - Home page channels
- GET /channels/record/{record_id} - Channels of one record
- GET /channels/search - Channels of a search

Dependencies: finna.core.channels, finna.models.channel
System role: Channel HTTP API
"""

import functools
import logging
from typing import Any, Callable, TypeVar

from fastapi import APIRouter, Depends, HTTPException, Query, status

from finna.api.deps.dependencies import get_channel_loader
from finna.boundary.solr.connector import SearchBackendError
from finna.core.channels.loader import ChannelLoader
from finna.core.channels.registry import UnknownProviderError
from finna.core.search.search_service import RecordMissingError, UnsupportedSourceError
from finna.models.channel import ChannelsResponse, RecordSummary

logger = logging.getLogger(__name__)

F = TypeVar("F", bound=Callable[..., Any])

router = APIRouter(prefix="/channels", tags=["channels"])


def handle_channel_errors(func: F) -> F:
    """Map search and channel errors to HTTP errors."""

    @functools.wraps(func)
    async def wrapper(*args: Any, **kwargs: Any) -> Any:
        try:
            return await func(*args, **kwargs)
        except RecordMissingError as e:
            logger.warning("Record not found", extra={"record_id": e.record_id})
            raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(e))
        except UnsupportedSourceError as e:
            raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
        except UnknownProviderError as e:
            logger.error("Unknown channel provider", extra={"provider": str(e)})
            raise HTTPException(
                status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
                detail="Channel configuration error",
            )
        except SearchBackendError as e:
            logger.error("Search backend error", extra={"error": str(e)})
            raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail="Search backend error")

    return wrapper  # type: ignore


@router.get("/home", response_model=ChannelsResponse)
@handle_channel_errors
async def home_channels(
    token: str | None = Query(default=None),
    channel: str | None = Query(default=None, description="Active channel provider id"),
    source: str | None = Query(default=None),
    loader: ChannelLoader = Depends(get_channel_loader),
) -> ChannelsResponse:
    """Channels for the home page."""
    context = await loader.get_home_context(token, channel, source)
    return ChannelsResponse(channels=context["channels"], token=context["token"])


@router.get("/record/{record_id}", response_model=ChannelsResponse)
@handle_channel_errors
async def record_channels(
    record_id: str,
    token: str | None = Query(default=None),
    channel: str | None = Query(default=None),
    source: str = Query(default="Solr"),
    loader: ChannelLoader = Depends(get_channel_loader),
) -> ChannelsResponse:
    """Channels built from one record."""
    context = await loader.get_record_context(record_id, token, channel, source)
    driver = context["driver"]
    return ChannelsResponse(
        channels=context["channels"],
        token=context["token"],
        record=RecordSummary(id=driver.unique_id, source=driver.source, title=driver.title),
    )


@router.get("/search", response_model=ChannelsResponse)
@handle_channel_errors
async def search_channels(
    lookfor: str = Query(default=""),
    token: str | None = Query(default=None),
    channel: str | None = Query(default=None),
    source: str = Query(default="Solr"),
    loader: ChannelLoader = Depends(get_channel_loader),
) -> ChannelsResponse:
    """Channels built from the results of a search."""
    context = await loader.get_search_context({"lookfor": lookfor}, token, channel, source)
    return ChannelsResponse(
        channels=context["channels"],
        token=context["token"],
        lookfor=context["lookfor"],
        total=context["results"].total,
    )
