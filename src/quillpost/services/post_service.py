"""Service-level helpers for reading and mutating posts."""
from __future__ import annotations

import logging
import math
from collections.abc import Sequence

from sqlalchemy import ColumnElement, false, func, or_, select, true
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session, selectinload
from sqlalchemy.sql.base import ExecutableOption

from quillpost.core.settings import settings
from quillpost.db.ids import is_object_id
from quillpost.db.time import utcnow
from quillpost.models import Comment, Post, PostLike, PostTag, User
from quillpost.models.post import POST_STATUS_PUBLISHED
from quillpost.schemas.post import PostCreate, PostUpdate
from quillpost.services.pagination import PageWindow
from quillpost.services.slug import slugify

logger = logging.getLogger(__name__)

__all__ = [
    "EmptySlugError",
    "SlugConflictError",
    "add_comment",
    "compute_read_time",
    "create_post",
    "find_post",
    "find_post_by_id",
    "list_posts",
    "normalize_tags",
    "post_load_options",
    "record_view",
    "slug_taken",
    "status_clause",
    "toggle_like",
    "update_post",
]

SORT_CREATED_AT = "createdAt"
SORT_VIEWS = "views"
SORT_LIKES = "likes"


class SlugConflictError(ValueError):
    """Raised when a title normalizes to a slug another post already holds."""

    def __init__(self, slug: str) -> None:
        super().__init__("A post with this title already exists")
        self.slug = slug


class EmptySlugError(ValueError):
    """Raised when a title contains no characters usable in a slug."""

    def __init__(self) -> None:
        super().__init__("Title must contain at least one letter or digit")


def compute_read_time(content: str, words_per_minute: int | None = None) -> int:
    """Return the estimated reading time of ``content`` in whole minutes."""
    wpm = words_per_minute or settings.words_per_minute
    return math.ceil(len(content.split()) / wpm)


def normalize_tags(tags: Sequence[str]) -> list[str]:
    """Lowercase and trim tags, keeping their order."""
    return [tag.strip().lower() for tag in tags]


def status_clause(status: str) -> ColumnElement[bool]:
    """Return a filter selecting posts in ``status``.

    Posts have no stored lifecycle, so every post is published and the other
    statuses select nothing.
    """
    return true() if status == POST_STATUS_PUBLISHED else false()


def post_load_options() -> list[ExecutableOption]:
    """Eager-load everything a serialized post needs."""
    return [
        selectinload(Post.author),
        selectinload(Post.tag_rows),
        selectinload(Post.like_rows),
        selectinload(Post.comments).selectinload(Comment.author),
    ]


def _like_count_expr() -> ColumnElement[int]:
    return (
        select(func.count(PostLike.user_id))
        .where(PostLike.post_id == Post.id)
        .correlate(Post)
        .scalar_subquery()
    )


def _sort_clauses(sort: str) -> list[ColumnElement[object]]:
    if sort == SORT_CREATED_AT:
        return [Post.created_at.desc(), Post.id.desc()]
    if sort == SORT_VIEWS:
        return [Post.views.desc(), Post.created_at.desc()]
    if sort == SORT_LIKES:
        return [_like_count_expr().desc(), Post.created_at.desc()]
    # Unknown keys fall back to insertion order.
    return [Post.created_at.asc(), Post.id.asc()]


def _listing_filters(
    *,
    tag: str | None,
    author_id: str | None,
    search: str | None,
) -> list[ColumnElement[bool]]:
    filters: list[ColumnElement[bool]] = []
    if tag:
        filters.append(Post.tag_rows.any(PostTag.name.icontains(tag, autoescape=True)))
    if author_id:
        filters.append(Post.author_id == author_id)
    if search:
        filters.append(
            or_(
                Post.title.icontains(search, autoescape=True),
                Post.content.icontains(search, autoescape=True),
                Post.tag_rows.any(PostTag.name.icontains(search, autoescape=True)),
            )
        )
    return filters


def list_posts(
    db: Session,
    window: PageWindow,
    *,
    tag: str | None = None,
    author_id: str | None = None,
    search: str | None = None,
    sort: str = SORT_CREATED_AT,
) -> tuple[list[Post], int]:
    """Return one page of posts matching the filters and the total match count."""
    filters = _listing_filters(tag=tag, author_id=author_id, search=search)
    total = db.scalar(select(func.count()).select_from(Post).where(*filters)) or 0
    stmt = (
        select(Post)
        .where(*filters)
        .options(*post_load_options())
        .order_by(*_sort_clauses(sort))
        .offset(window.offset)
        .limit(window.limit)
    )
    return list(db.scalars(stmt)), int(total)


def find_post_by_id(db: Session, post_id: str) -> Post | None:
    """Return a post by identifier."""
    stmt = select(Post).where(Post.id == post_id).options(*post_load_options())
    return db.scalars(stmt).first()


def find_post(db: Session, key: str) -> Post | None:
    """Return a post by id when ``key`` looks like one, otherwise by slug."""
    if is_object_id(key):
        return find_post_by_id(db, key.lower())
    stmt = select(Post).where(Post.slug == key).options(*post_load_options())
    return db.scalars(stmt).first()


def slug_taken(db: Session, slug: str, *, exclude_id: str | None = None) -> bool:
    """Return True if a post other than ``exclude_id`` already uses ``slug``."""
    stmt = select(Post.id).where(Post.slug == slug)
    if exclude_id is not None:
        stmt = stmt.where(Post.id != exclude_id)
    return db.scalars(stmt.limit(1)).first() is not None


def _slug_for(db: Session, title: str, *, exclude_id: str | None = None) -> str:
    slug = slugify(title)
    if not slug:
        raise EmptySlugError()
    if slug_taken(db, slug, exclude_id=exclude_id):
        raise SlugConflictError(slug)
    return slug


def _commit_post(db: Session, slug: str) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        # A concurrent writer claimed the slug between the check and the insert.
        db.rollback()
        raise SlugConflictError(slug) from exc


def create_post(db: Session, author: User, data: PostCreate) -> Post:
    """Persist a new post owned by ``author``.

    Raises:
        EmptySlugError: If the title yields an empty slug.
        SlugConflictError: If another post already holds the slug.
    """
    slug = _slug_for(db, data.title)
    post = Post(
        title=data.title,
        content=data.content,
        slug=slug,
        author_id=author.id,
        featured_image=data.featured_image,
        read_time=compute_read_time(data.content),
        views=0,
    )
    post.tags = normalize_tags(data.tags)
    db.add(post)
    _commit_post(db, slug)
    db.refresh(post)
    logger.info("Post %s created by %s with slug %r", post.id, author.id, slug)
    return post


def update_post(db: Session, post: Post, data: PostUpdate) -> Post:
    """Apply the fields present in ``data`` to ``post``.

    The slug is regenerated only when the title actually changes, and the read
    time only when the content changes.
    """
    changes = data.model_dump(exclude_unset=True)

    title = changes.get("title")
    if title is not None and title != post.title:
        post.slug = _slug_for(db, title, exclude_id=post.id)
        post.title = title

    content = changes.get("content")
    if content is not None and content != post.content:
        post.content = content
        post.read_time = compute_read_time(content)

    if "tags" in changes:
        post.tags = normalize_tags(changes["tags"])

    if "featured_image" in changes:
        post.featured_image = changes["featured_image"]

    _commit_post(db, post.slug)
    db.refresh(post)
    return post


def record_view(db: Session, post: Post) -> Post:
    """Increment the view counter in the database and reload the post."""
    post.views = Post.views + 1  # type: ignore[assignment]
    db.commit()
    db.refresh(post)
    return post


def toggle_like(db: Session, post: Post, user: User) -> bool:
    """Like or unlike ``post`` on behalf of ``user``.

    Returns:
        True if the post is liked by the user after the call.
    """
    existing = next((like for like in post.like_rows if like.user_id == user.id), None)
    if existing is not None:
        post.like_rows.remove(existing)
        liked = False
    else:
        post.like_rows.append(PostLike(user_id=user.id, created_at=utcnow()))
        liked = True
    db.commit()
    db.refresh(post)
    return liked


def add_comment(db: Session, post: Post, author: User, content: str) -> Comment:
    """Append an approved comment to ``post`` and return it."""
    comment = Comment(
        author_id=author.id,
        content=content,
        is_approved=True,
        created_at=utcnow(),
    )
    post.comments.append(comment)
    db.commit()
    db.refresh(post)
    db.refresh(comment)
    return comment
