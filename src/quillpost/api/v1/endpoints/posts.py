# src/quillpost/api/v1/endpoints/posts.py
"""Post-related endpoints for the Quillpost API."""

import logging

from fastapi import APIRouter, HTTPException, Query, status
from fastapi.exceptions import RequestValidationError
from sqlalchemy.orm import Session

from quillpost.api.v1.dependencies import CurrentUserDep, PageDep, SessionDep
from quillpost.db.ids import is_object_id
from quillpost.models import Post, User
from quillpost.schemas.common import MessageResponse, PostPagination
from quillpost.schemas.post import (
    CommentCreate,
    CommentCreateResponse,
    CommentResponse,
    CommentThread,
    LikeSummary,
    LikeToggleResponse,
    PostCreate,
    PostDetailEnvelope,
    PostDetailResponse,
    PostListResponse,
    PostMessageResponse,
    PostResponse,
    PostUpdate,
)
from quillpost.services import post_service
from quillpost.services.post_service import EmptySlugError, SlugConflictError

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/posts", tags=["posts"])


def _get_post_or_404(db: Session, post_id: str) -> Post:
    post = post_service.find_post_by_id(db, post_id)
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    return post


def _ensure_can_modify(post: Post, current_user: User, action: str) -> None:
    """Allow the post's author or an admin; everyone else gets 403."""
    is_author = post.author_id == current_user.id
    logger.debug(
        "Authorization check for %s on post %s: author=%s caller=%s role=%s",
        action,
        post.id,
        post.author_id,
        current_user.id,
        current_user.role,
    )
    if not is_author and not current_user.is_admin:
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail=f"Not authorized to {action} this post",
        )


def _slug_error(exc: ValueError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))


@router.get("", response_model=PostListResponse)
async def list_posts(
    db: SessionDep,
    window: PageDep,
    tag: str | None = Query(None, description="Case-insensitive tag substring"),
    author: str | None = Query(None, description="Only posts by this author id"),
    search: str | None = Query(None, description="Search title, content and tags"),
    sort: str = Query("createdAt", description="createdAt, views or likes (descending)"),
) -> PostListResponse:
    """List posts with pagination, filtering and search.

    Args:
        db: Database session
        window: Requested page and page size
        tag: Only posts with a tag containing this text
        author: Only posts written by this user
        search: Only posts whose title, content or tags contain this text
        sort: Sort key; unknown keys fall back to insertion order

    Returns:
        The requested page of posts plus pagination metadata

    Raises:
        RequestValidationError: If ``author`` is not a well-formed user id
    """
    if author is not None and not is_object_id(author):
        raise RequestValidationError(
            [
                {
                    "type": "value_error",
                    "loc": ("query", "author"),
                    "msg": "Invalid author ID",
                    "input": author,
                }
            ]
        )
    posts, total = post_service.list_posts(
        db,
        window,
        tag=(tag or "").strip() or None,
        author_id=author.lower() if author else None,
        search=(search or "").strip() or None,
        sort=sort,
    )
    return PostListResponse(
        posts=[PostResponse.model_validate(post) for post in posts],
        pagination=PostPagination(
            total_posts=total,
            **window.describe(total, len(posts)),
        ),
    )


@router.get("/{post_key}", response_model=PostDetailEnvelope)
async def get_post(post_key: str, db: SessionDep) -> PostDetailEnvelope:
    """Get a post by id or slug and count the view.

    Args:
        post_key: 24-character hex id, or the post slug
        db: Database session

    Returns:
        The post, wrapped under ``post``, with its view counter already incremented

    Raises:
        HTTPException: If no post matches
    """
    post = post_service.find_post(db, post_key)
    if post is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail="Post not found",
        )
    post = post_service.record_view(db, post)
    return PostDetailEnvelope(post=PostDetailResponse.model_validate(post))


@router.post("", response_model=PostMessageResponse, status_code=status.HTTP_201_CREATED)
async def create_post(
    post_data: PostCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostMessageResponse:
    """Create a new post owned by the caller.

    Raises:
        HTTPException: If the title's slug is empty or already taken
    """
    try:
        post = post_service.create_post(db, current_user, post_data)
    except (EmptySlugError, SlugConflictError) as exc:
        raise _slug_error(exc) from exc
    return PostMessageResponse(
        message="Post created successfully",
        post=PostResponse.model_validate(post),
    )


@router.put("/{post_id}", response_model=PostMessageResponse)
async def update_post(
    post_id: str,
    post_data: PostUpdate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> PostMessageResponse:
    """Update any subset of a post's fields.

    Args:
        post_id: ID of the post to update
        post_data: Fields to change; omitted fields are left untouched
        current_user: Authenticated user (must be the author or an admin)
        db: Database session

    Raises:
        HTTPException: If the post is missing (404), the caller may not edit it
            (403) or the new title collides with another post's slug (400)
    """
    post = _get_post_or_404(db, post_id)
    _ensure_can_modify(post, current_user, "update")
    try:
        post = post_service.update_post(db, post, post_data)
    except (EmptySlugError, SlugConflictError) as exc:
        raise _slug_error(exc) from exc
    return PostMessageResponse(
        message="Post updated successfully",
        post=PostResponse.model_validate(post),
    )


@router.delete("/{post_id}", response_model=MessageResponse)
async def delete_post(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> MessageResponse:
    """Permanently delete a post together with its tags, likes and comments.

    Raises:
        HTTPException: If the post is missing (404) or the caller may not delete it (403)
    """
    post = _get_post_or_404(db, post_id)
    _ensure_can_modify(post, current_user, "delete")
    db.delete(post)
    db.commit()
    return MessageResponse(message="Post deleted successfully")


@router.post("/{post_id}/like", response_model=LikeToggleResponse)
async def toggle_like(
    post_id: str,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> LikeToggleResponse:
    """Like the post, or remove the caller's like if it is already there."""
    post = _get_post_or_404(db, post_id)
    liked = post_service.toggle_like(db, post, current_user)
    return LikeToggleResponse(
        message="Post liked" if liked else "Post unliked",
        is_liked=liked,
        like_count=post.like_count,
        post=LikeSummary(id=post.id, likes=post.likes, like_count=post.like_count),
    )


@router.post(
    "/{post_id}/comments",
    response_model=CommentCreateResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_comment(
    post_id: str,
    comment_data: CommentCreate,
    current_user: CurrentUserDep,
    db: SessionDep,
) -> CommentCreateResponse:
    """Append a comment to a post.

    Comments are approved on creation and cannot be edited or removed through
    the API.
    """
    post = _get_post_or_404(db, post_id)
    comment = post_service.add_comment(db, post, current_user, comment_data.content)
    return CommentCreateResponse(
        message="Comment added successfully",
        comment=CommentResponse.model_validate(comment),
        post=CommentThread(
            id=post.id,
            comments=[CommentResponse.model_validate(c) for c in post.comments],
            comment_count=post.comment_count,
        ),
    )
