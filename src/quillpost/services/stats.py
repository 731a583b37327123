"""Platform-wide statistics for the admin overview."""
from __future__ import annotations

from typing import Any

from sqlalchemy import func, select
from sqlalchemy.orm import Session, selectinload

from quillpost.core.settings import settings
from quillpost.models import Comment, Post, User
from quillpost.models.post import POST_STATUS_DRAFT, POST_STATUS_PUBLISHED
from quillpost.services.post_service import status_clause


def _count(db: Session, model: type[Any], *filters: Any) -> int:
    stmt = select(func.count()).select_from(model).where(*filters)
    return int(db.scalar(stmt) or 0)


def collect_overview(db: Session, recent_limit: int | None = None) -> dict[str, Any]:
    """Gather the counts and recent activity shown on the admin dashboard.

    The reads are independent of one another and run in the request's
    session; any failing query fails the whole overview.

    Args:
        db: Database session.
        recent_limit: Number of recent users/posts to include. Defaults to
            ``settings.recent_items_limit``.

    Returns:
        Mapping shaped like ``StatsResponse``.
    """
    limit = recent_limit or settings.recent_items_limit

    recent_users = list(
        db.scalars(select(User).order_by(User.created_at.desc(), User.id.desc()).limit(limit))
    )
    # Publish time equals creation time for every post.
    recent_posts = list(
        db.scalars(
            select(Post)
            .where(status_clause(POST_STATUS_PUBLISHED))
            .options(selectinload(Post.author))
            .order_by(Post.created_at.desc(), Post.id.desc())
            .limit(limit)
        )
    )

    return {
        "overview": {
            "total_users": _count(db, User),
            "total_posts": _count(db, Post),
            "published_posts": _count(db, Post, status_clause(POST_STATUS_PUBLISHED)),
            "draft_posts": _count(db, Post, status_clause(POST_STATUS_DRAFT)),
            "total_comments": _count(db, Comment),
        },
        "recent": {
            "users": recent_users,
            "posts": recent_posts,
        },
    }
