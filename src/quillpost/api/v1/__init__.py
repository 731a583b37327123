# src/quillpost/api/v1/__init__.py
"""Version 1 API endpoints."""

from .endpoints import posts_router, users_router

__all__ = [
    "posts_router",
    "users_router",
]
