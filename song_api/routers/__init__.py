"""
Routers package for API endpoints.

This package contains all API route handlers organized by functionality.
"""

from .song import router as song_router
from .related import router as related_router
from .download import router as download_router
from .health import router as health_router
from .admin import router as admin_router

__all__ = [
    "song_router",
    "related_router",
    "download_router",
    "health_router",
    "admin_router",
]
