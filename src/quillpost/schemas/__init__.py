# src/quillpost/schemas/__init__.py
"""
Pydantic schemas for API request/response models.

These schemas define the structure of API data for serialization and validation.
"""

from .common import MessageResponse, PostPagination, UserPagination
from .post import (
    CommentCreate,
    CommentCreateResponse,
    LikeToggleResponse,
    PostCreate,
    PostDetailEnvelope,
    PostDetailResponse,
    PostListResponse,
    PostMessageResponse,
    PostResponse,
    PostUpdate,
)
from .stats import StatsResponse
from .user import (
    UserDetailEnvelope,
    UserDetailResponse,
    UserListResponse,
    UserMessageResponse,
    UserResponse,
    UserUpdate,
)

__all__ = [
    "MessageResponse", "PostPagination", "UserPagination",
    "CommentCreate", "CommentCreateResponse", "LikeToggleResponse",
    "PostCreate", "PostDetailEnvelope", "PostDetailResponse", "PostListResponse",
    "PostMessageResponse", "PostResponse", "PostUpdate",
    "StatsResponse",
    "UserDetailEnvelope", "UserDetailResponse", "UserListResponse", "UserMessageResponse",
    "UserResponse", "UserUpdate",
]
