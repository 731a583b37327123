"""User-related Pydantic schemas."""

from __future__ import annotations

from typing import Any, Literal

from pydantic import Field, HttpUrl, TypeAdapter, ValidationError, field_validator

from .common import CamelModel, UserPagination, UTCDateTime

NAME_MAX_LENGTH = 50
BIO_MAX_LENGTH = 500

_http_url_adapter: TypeAdapter[HttpUrl] = TypeAdapter(HttpUrl)


class UserResponse(CamelModel):
    """Public account representation. The password hash is never included."""

    id: str
    username: str
    email: str
    first_name: str
    last_name: str
    bio: str
    avatar: str
    role: str
    is_active: bool
    created_at: UTCDateTime
    updated_at: UTCDateTime


class UserDetailResponse(UserResponse):
    posts_count: int = Field(..., description="Number of published posts by the user")


class UserDetailEnvelope(CamelModel):
    user: UserDetailResponse


class UserListResponse(CamelModel):
    users: list[UserResponse]
    pagination: UserPagination


class UserMessageResponse(CamelModel):
    message: str
    user: UserResponse


class UserUpdate(CamelModel):
    """Partial profile update.

    ``role`` and ``is_active`` are only honoured for admin callers; the
    endpoint drops them for everyone else.
    """

    first_name: str | None = None
    last_name: str | None = None
    bio: str | None = None
    avatar: str | None = None
    role: Literal["user", "admin"] | None = None
    is_active: bool | None = None

    @field_validator("first_name", "last_name", "role", "is_active", mode="before")
    @classmethod
    def _reject_null(cls, v: Any) -> Any:
        if v is None:
            raise ValueError("Field may be omitted but not null")
        return v

    @field_validator("first_name")
    @classmethod
    def _check_first_name(cls, v: str) -> str:
        v = v.strip()
        if not 1 <= len(v) <= NAME_MAX_LENGTH:
            raise ValueError(f"First name must be between 1 and {NAME_MAX_LENGTH} characters")
        return v

    @field_validator("last_name")
    @classmethod
    def _check_last_name(cls, v: str) -> str:
        v = v.strip()
        if not 1 <= len(v) <= NAME_MAX_LENGTH:
            raise ValueError(f"Last name must be between 1 and {NAME_MAX_LENGTH} characters")
        return v

    @field_validator("bio", mode="before")
    @classmethod
    def _check_bio(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            v = v.strip()
            if len(v) > BIO_MAX_LENGTH:
                raise ValueError(f"Bio must be less than {BIO_MAX_LENGTH} characters")
        return v

    @field_validator("avatar", mode="before")
    @classmethod
    def _check_avatar(cls, v: Any) -> Any:
        if v is None:
            return ""
        if isinstance(v, str):
            v = v.strip()
            if not v:
                return v
            try:
                _http_url_adapter.validate_python(v)
            except ValidationError as err:
                raise ValueError("Avatar must be a valid URL") from err
        return v
