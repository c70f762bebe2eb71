"""API routers."""

from src.api.auth import router as auth_router
from src.api.router import api_router

__all__ = ["api_router", "auth_router"]
