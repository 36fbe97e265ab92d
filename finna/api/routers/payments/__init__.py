"""Online payment routes."""

from .payments_router import router

__all__ = ["router"]
