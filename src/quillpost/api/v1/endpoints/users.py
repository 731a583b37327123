# src/quillpost/api/v1/endpoints/users.py
"""User management and admin statistics endpoints."""

from __future__ import annotations

from typing import Literal

from fastapi import APIRouter, HTTPException, Query, status
from sqlalchemy.orm import Session

from quillpost.api.v1.dependencies import (
    AdminUserDep,
    CurrentUserDep,
    OptionalUserDep,
    PageDep,
    SessionDep,
)
from quillpost.models import User
from quillpost.models.post import POST_STATUS_PUBLISHED
from quillpost.schemas.common import MessageResponse, PostPagination, UserPagination
from quillpost.schemas.post import PostListResponse, PostResponse
from quillpost.schemas.stats import StatsResponse
from quillpost.schemas.user import (
    UserDetailEnvelope,
    UserDetailResponse,
    UserListResponse,
    UserMessageResponse,
    UserResponse,
    UserUpdate,
)
from quillpost.services import stats, user_service

router = APIRouter(prefix="/users", tags=["users"])

PostStatusParam = Literal["draft", "published", "archived"]


def _get_user_or_404(db: Session, user_id: str) -> User:
    user = user_service.get_user(db, user_id)
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail="User not found")
    return user


@router.get("", response_model=UserListResponse)
async def list_users(
    admin: AdminUserDep,
    db: SessionDep,
    window: PageDep,
    search: str | None = Query(
        None,
        description="Case-insensitive match on username, email, first or last name",
    ),
) -> UserListResponse:
    """List accounts, newest first (admin only)."""
    users, total = user_service.list_users(db, window, search=(search or "").strip() or None)
    return UserListResponse(
        users=[UserResponse.model_validate(user) for user in users],
        pagination=UserPagination(total_users=total, **window.describe(total, len(users))),
    )


# Declared before "/{user_id}" routes so "stats" is never read as an id.
@router.get("/stats/overview", response_model=StatsResponse)
async def get_stats_overview(admin: AdminUserDep, db: SessionDep) -> StatsResponse:
    """Return platform totals and the most recent users and posts (admin only)."""
    return StatsResponse.model_validate(stats.collect_overview(db), from_attributes=True)


@router.get("/{user_id}", response_model=UserDetailEnvelope)
async def get_user(user_id: str, db: SessionDep) -> UserDetailEnvelope:
    """Return a public profile with the number of published posts.

    Raises:
        HTTPException: If the user does not exist
    """
    user = _get_user_or_404(db, user_id)
    posts_count = user_service.count_posts(db, user.id, POST_STATUS_PUBLISHED)
    payload = UserResponse.model_validate(user).model_dump()
    return UserDetailEnvelope(user=UserDetailResponse(**payload, posts_count=posts_count))


@router.get("/{user_id}/posts", response_model=PostListResponse)
async def get_user_posts(
    user_id: str,
    db: SessionDep,
    window: PageDep,
    current_user: OptionalUserDep,
    post_status: PostStatusParam = Query(POST_STATUS_PUBLISHED, alias="status"),
) -> PostListResponse:
    """List a user's posts, most recently published first.

    Anonymous callers only ever see published posts; authenticated callers may
    ask for another status.

    Raises:
        HTTPException: If the user does not exist
    """
    user = _get_user_or_404(db, user_id)
    effective_status = post_status if current_user is not None else POST_STATUS_PUBLISHED
    posts, total = user_service.list_user_posts(db, user.id, window, status=effective_status)
    return PostListResponse(
        posts=[PostResponse.model_validate(post) for post in posts],
        pagination=PostPagination(total_posts=total, **window.describe(total, len(posts))),
    )


@router.put("/{user_id}", response_model=UserMessageResponse)
async def update_user(
    user_id: str,
    update_data: UserUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> UserMessageResponse:
    """Update a profile. Only admins may change ``role`` or ``isActive``.

    Args:
        user_id: ID of the account to update
        update_data: Fields to change; omitted fields are left untouched
        current_user: Authenticated caller (the account owner or an admin)
        db: Database session

    Raises:
        HTTPException: If the caller may not edit the account (403) or it does
            not exist (404)
    """
    if current_user.id != user_id and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Not authorized to update this user",
        )
    user = _get_user_or_404(db, user_id)
    user = user_service.apply_user_update(
        db,
        user,
        update_data,
        allow_admin_fields=current_user.is_admin,
    )
    return UserMessageResponse(
        message="User updated successfully",
        user=UserResponse.model_validate(user),
    )


@router.delete("/{user_id}", response_model=MessageResponse)
async def delete_user(user_id: str, admin: AdminUserDep, db: SessionDep) -> MessageResponse:
    """Delete an account and every post it owns (admin only).

    Raises:
        HTTPException: If the admin targets their own account (400) or the
            account does not exist (404)
    """
    if admin.id == user_id:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Cannot delete your own account",
        )
    user = _get_user_or_404(db, user_id)
    user_service.delete_user_with_posts(db, user)
    return MessageResponse(message="User and associated posts deleted successfully")
