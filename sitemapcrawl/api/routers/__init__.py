"""API router factory functions."""
from .auth import create_auth_router
from .sitemaps import create_sitemaps_router
from .systems import create_systems_router

__all__ = [
    "create_auth_router",
    "create_sitemaps_router",
    "create_systems_router",
]
