"""API routers."""

from .channels import router as channels_router
from .health import router as health_router
from .payments import router as payments_router
from .themes import router as themes_router

__all__ = [
    "channels_router",
    "health_router",
    "payments_router",
    "themes_router",
]
