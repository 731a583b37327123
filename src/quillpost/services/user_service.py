"""CRUD-style helpers for managing users."""
from __future__ import annotations

import logging

from sqlalchemy import delete, func, or_, select, update
from sqlalchemy.orm import Session

from quillpost.models import Comment, Post, PostLike, User
from quillpost.schemas.user import UserUpdate
from quillpost.services.pagination import PageWindow
from quillpost.services.post_service import post_load_options, status_clause

logger = logging.getLogger(__name__)

__all__ = [
    "ADMIN_ONLY_FIELDS",
    "apply_user_update",
    "count_posts",
    "delete_user_with_posts",
    "get_user",
    "list_user_posts",
    "list_users",
]

# Fields a non-admin caller may not change, even on their own account.
ADMIN_ONLY_FIELDS = frozenset({"role", "is_active"})


def get_user(db: Session, user_id: str) -> User | None:
    """Return a single user by primary key."""
    return db.get(User, user_id)


def list_users(
    db: Session,
    window: PageWindow,
    *,
    search: str | None = None,
) -> tuple[list[User], int]:
    """Return one page of users, newest first, with the total match count."""
    filters = []
    if search:
        filters.append(
            or_(
                User.username.icontains(search, autoescape=True),
                User.email.icontains(search, autoescape=True),
                User.first_name.icontains(search, autoescape=True),
                User.last_name.icontains(search, autoescape=True),
            )
        )
    total = db.scalar(select(func.count()).select_from(User).where(*filters)) or 0
    stmt = (
        select(User)
        .where(*filters)
        .order_by(User.created_at.desc(), User.id.desc())
        .offset(window.offset)
        .limit(window.limit)
    )
    return list(db.scalars(stmt)), int(total)


def count_posts(db: Session, user_id: str, status: str) -> int:
    """Count the posts ``user_id`` has in ``status``."""
    stmt = (
        select(func.count())
        .select_from(Post)
        .where(Post.author_id == user_id, status_clause(status))
    )
    return int(db.scalar(stmt) or 0)


def list_user_posts(
    db: Session,
    user_id: str,
    window: PageWindow,
    *,
    status: str,
) -> tuple[list[Post], int]:
    """Return a page of the user's posts in ``status``, most recently published first."""
    filters = [Post.author_id == user_id, status_clause(status)]
    total = db.scalar(select(func.count()).select_from(Post).where(*filters)) or 0
    # Publish time equals creation time, so one ordering column serves both keys.
    stmt = (
        select(Post)
        .where(*filters)
        .options(*post_load_options())
        .order_by(Post.created_at.desc(), Post.id.desc())
        .offset(window.offset)
        .limit(window.limit)
    )
    return list(db.scalars(stmt)), int(total)


def apply_user_update(
    db: Session,
    user: User,
    update_data: UserUpdate,
    *,
    allow_admin_fields: bool,
) -> User:
    """Apply partial updates to an existing user.

    Admin-only fields are silently dropped when ``allow_admin_fields`` is False.
    """
    update_dict = update_data.model_dump(exclude_unset=True)
    if not allow_admin_fields:
        for key in ADMIN_ONLY_FIELDS:
            update_dict.pop(key, None)
    for key, value in update_dict.items():
        setattr(user, key, value)

    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def delete_user_with_posts(db: Session, user: User) -> int:
    """Delete ``user`` and every post they authored.

    Likes the user left elsewhere are removed and their comments on other
    people's posts are kept without an author.

    Returns:
        Number of posts deleted.
    """
    user_id = user.id
    posts = list(db.scalars(select(Post).where(Post.author_id == user_id)))
    for post in posts:
        db.delete(post)
    db.flush()

    db.execute(delete(PostLike).where(PostLike.user_id == user_id))
    db.execute(update(Comment).where(Comment.author_id == user_id).values(author_id=None))
    db.delete(user)
    db.commit()
    logger.info("Deleted user %s and %d owned posts", user_id, len(posts))
    return len(posts)
