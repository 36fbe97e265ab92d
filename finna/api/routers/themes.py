"""
Theme API endpoints.

Routes: GET /themes/current, GET /themes/config

Dependencies: finna.core.theme
System role: Theme configuration HTTP API
"""

from fastapi import APIRouter, Depends, Query

from finna.api.deps.dependencies import get_theme_info
from finna.core.theme.theme_info import ThemeInfo
from finna.models.theme import ThemeConfigResponse, ThemeResponse

router = APIRouter(prefix="/themes", tags=["themes"])


@router.get("/current", response_model=ThemeResponse)
async def current_theme(theme_info: ThemeInfo = Depends(get_theme_info)) -> ThemeResponse:
    """Active theme and its inheritance chain, child first."""
    return ThemeResponse(theme=theme_info.get_theme(), themes=list(theme_info.get_theme_info()))


@router.get("/config", response_model=ThemeConfigResponse)
async def theme_config(
    key: str = Query(default="", description="Configuration key; empty for everything"),
    theme_info: ThemeInfo = Depends(get_theme_info),
) -> ThemeConfigResponse:
    """Configuration merged over the theme chain."""
    return ThemeConfigResponse(
        theme=theme_info.get_theme(),
        key=key,
        config=theme_info.get_merged_config(key),
    )
