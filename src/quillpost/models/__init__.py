# src/quillpost/models/__init__.py
"""SQLAlchemy models for the Quillpost application."""

from .post import Comment, Post, PostLike, PostTag
from .user import User

__all__ = [
    "Comment", "Post", "PostLike", "PostTag",
    "User",
]
