"""Shared Pydantic schemas for common API elements."""
from __future__ import annotations

from datetime import datetime
from typing import Annotated

from pydantic import AfterValidator, BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from quillpost.db.time import as_utc

# Timestamps always leave the API with an explicit UTC offset.
UTCDateTime = Annotated[datetime, AfterValidator(as_utc)]


class CamelModel(BaseModel):
    """Base schema exposing camelCase names on the wire.

    Python code uses snake_case field names; both spellings are accepted on
    input.
    """

    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        from_attributes=True,
    )


class MessageResponse(CamelModel):
    """Plain acknowledgement returned by destructive endpoints."""

    message: str


class PaginationBase(CamelModel):
    """Page arithmetic shared by every paginated listing."""

    current_page: int = Field(..., description="1-based page number that was returned")
    total_pages: int = Field(..., description="ceil(total / limit)")
    has_next: bool
    has_prev: bool


class PostPagination(PaginationBase):
    total_posts: int


class UserPagination(PaginationBase):
    total_users: int
