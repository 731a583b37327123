"""Post-related Pydantic schemas."""

from __future__ import annotations

import re
from typing import Any

from pydantic import Field, field_validator

from .common import CamelModel, PostPagination, UTCDateTime

TITLE_MAX_LENGTH = 200
CONTENT_MAX_LENGTH = 50_000
COMMENT_MAX_LENGTH = 1000

_HTTP_URL_RE = re.compile(r"^https?://.+")
_IMAGE_DATA_URL_RE = re.compile(r"^data:image/[a-zA-Z]*;base64,")


def validate_title(value: str) -> str:
    value = value.strip()
    if not 1 <= len(value) <= TITLE_MAX_LENGTH:
        raise ValueError(f"Title must be between 1 and {TITLE_MAX_LENGTH} characters")
    return value


def validate_content(value: str) -> str:
    if not 1 <= len(value) <= CONTENT_MAX_LENGTH:
        raise ValueError(f"Content must be between 1 and {CONTENT_MAX_LENGTH} characters")
    return value


def validate_tags(value: Any) -> Any:
    if not isinstance(value, list):
        raise ValueError("Tags must be an array")
    return value


def normalize_featured_image(value: str) -> str:
    """Trim a featured image reference and check it is a URL or image data-URL.

    An empty value is allowed and clears the image.
    """
    value = value.strip()
    if not value:
        return value
    if _HTTP_URL_RE.match(value) or _IMAGE_DATA_URL_RE.match(value):
        return value
    raise ValueError("Featured image must be a valid URL or base64 data URL")


class PostCreate(CamelModel):
    """Schema for creating a new post."""

    title: str = Field(..., description="Post title, 1-200 characters after trimming")
    content: str = Field(..., description="Post body, 1-50000 characters")
    tags: list[str] = Field(default_factory=list, description="Free-form tags")
    featured_image: str = Field("", description="http(s) URL or base64 image data-URL")

    @field_validator("title")
    @classmethod
    def _check_title(cls, v: str) -> str:
        return validate_title(v)

    @field_validator("content")
    @classmethod
    def _check_content(cls, v: str) -> str:
        return validate_content(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _check_tags(cls, v: Any) -> Any:
        return validate_tags(v)

    @field_validator("featured_image", mode="before")
    @classmethod
    def _check_featured_image(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return normalize_featured_image(v)
        return v


class PostUpdate(CamelModel):
    """Partial update for a post; only the fields that are sent are applied."""

    title: str | None = None
    content: str | None = None
    tags: list[str] | None = None
    featured_image: str | None = None

    @field_validator("title", "content", "tags", mode="before")
    @classmethod
    def _reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v

    @field_validator("title")
    @classmethod
    def _check_title(cls, v: str) -> str:
        return validate_title(v)

    @field_validator("content")
    @classmethod
    def _check_content(cls, v: str) -> str:
        return validate_content(v)

    @field_validator("tags", mode="before")
    @classmethod
    def _check_tags(cls, v: Any) -> Any:
        return validate_tags(v)

    @field_validator("featured_image", mode="before")
    @classmethod
    def _check_featured_image(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            return normalize_featured_image(v)
        return v


class CommentCreate(CamelModel):
    """Schema for appending a comment to a post."""

    content: str

    @field_validator("content")
    @classmethod
    def _check_content(cls, v: str) -> str:
        v = v.strip()
        if not 1 <= len(v) <= COMMENT_MAX_LENGTH:
            raise ValueError(f"Comment must be between 1 and {COMMENT_MAX_LENGTH} characters")
        return v


class AuthorSummary(CamelModel):
    """Reduced author projection embedded in post payloads."""

    id: str
    username: str
    first_name: str
    last_name: str
    avatar: str


class AuthorProfile(AuthorSummary):
    bio: str


class CommentResponse(CamelModel):
    id: str
    author: AuthorSummary | None
    content: str
    created_at: UTCDateTime
    is_approved: bool


class PostResponse(CamelModel):
    """Schema for post information returned by the API."""

    id: str
    title: str
    content: str
    slug: str
    author: AuthorSummary
    featured_image: str
    tags: list[str]
    read_time: int
    views: int
    likes: list[str]
    like_count: int
    comments: list[CommentResponse]
    comment_count: int
    status: str
    published_at: UTCDateTime
    created_at: UTCDateTime
    updated_at: UTCDateTime

    @field_validator("tags", "likes", mode="before")
    @classmethod
    def _as_list(cls, v: Any) -> Any:
        # ORM association proxies are sequences but not lists.
        return list(v) if v is not None else v


class PostDetailResponse(PostResponse):
    """Single-post payload; the author projection includes the bio."""

    author: AuthorProfile


class PostDetailEnvelope(CamelModel):
    post: PostDetailResponse


class PostListResponse(CamelModel):
    posts: list[PostResponse]
    pagination: PostPagination


class PostMessageResponse(CamelModel):
    message: str
    post: PostResponse


class LikeSummary(CamelModel):
    id: str
    likes: list[str]
    like_count: int


class LikeToggleResponse(CamelModel):
    message: str
    is_liked: bool
    like_count: int
    post: LikeSummary


class CommentThread(CamelModel):
    id: str
    comments: list[CommentResponse]
    comment_count: int


class CommentCreateResponse(CamelModel):
    message: str
    comment: CommentResponse
    post: CommentThread
