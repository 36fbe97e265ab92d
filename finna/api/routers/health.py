"""
Health check API endpoints.

Routes: GET /health, GET /health/db, GET /health/search

Dependencies: finna.boundary
System role: Health check HTTP API
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from finna.api.deps.dependencies import get_search_service
from finna.boundary.db import get_async_db
from finna.core.search.search_service import SearchService
from finna.models.common import HealthResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", response_model=HealthResponse)
async def health_check() -> HealthResponse:
    """Basic health check."""
    return HealthResponse(status="healthy", message="Server Healthy")


@router.get("/db", response_model=HealthResponse)
async def health_check_db(db: AsyncSession = Depends(get_async_db)) -> HealthResponse:
    """Database health check."""
    try:
        await db.execute(text("SELECT 1"))
    except SQLAlchemyError as e:
        logger.error("Database health check failed", extra={"error": str(e)})
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Database unavailable",
        )
    return HealthResponse(status="healthy", message="Database connection OK")


@router.get("/search", response_model=HealthResponse)
async def health_check_search(
    search_service: SearchService = Depends(get_search_service),
) -> HealthResponse:
    """Search index health check."""
    for source, connector in search_service.connectors.items():
        if not await connector.ping():
            raise HTTPException(
                status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
                detail=f"Search backend {source} unavailable",
            )
    return HealthResponse(status="healthy", message="Search index accessible")
