# src/quillpost/models/post.py
"""SQLAlchemy models for posts and the records attached to them."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import Boolean, DateTime, ForeignKey, Integer, String, Text
from sqlalchemy.ext.associationproxy import AssociationProxy, association_proxy
from sqlalchemy.ext.orderinglist import ordering_list
from sqlalchemy.orm import Mapped, mapped_column, relationship

from quillpost.db.ids import new_object_id
from quillpost.db.session import Base
from quillpost.db.time import utcnow

if TYPE_CHECKING:
    from .user import User

# Posts have no stored lifecycle; every post is treated as published.
POST_STATUS_DRAFT = "draft"
POST_STATUS_PUBLISHED = "published"
POST_STATUS_ARCHIVED = "archived"
POST_STATUSES = (POST_STATUS_DRAFT, POST_STATUS_PUBLISHED, POST_STATUS_ARCHIVED)


class Post(Base):
    """Blog post written by a single author."""

    __tablename__ = "post"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    title: Mapped[str] = mapped_column(String(200), nullable=False)
    content: Mapped[str] = mapped_column(Text, nullable=False)
    slug: Mapped[str] = mapped_column(String(255), unique=True, nullable=False, index=True)
    author_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("user_account.id"),
        nullable=False,
        index=True,
    )
    # URL or base64 image data-URL; empty string when unset.
    featured_image: Mapped[str] = mapped_column(Text, nullable=False, default="")
    # Minutes, derived from the content word count.
    read_time: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    views: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, index=True
    )
    updated_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow, onupdate=utcnow
    )

    author: Mapped[User] = relationship("User", back_populates="posts")
    tag_rows: Mapped[list[PostTag]] = relationship(
        "PostTag",
        order_by="PostTag.position",
        collection_class=ordering_list("position"),
        cascade="all, delete-orphan",
    )
    like_rows: Mapped[list[PostLike]] = relationship(
        "PostLike",
        order_by="PostLike.created_at",
        cascade="all, delete-orphan",
    )
    comments: Mapped[list[Comment]] = relationship(
        "Comment",
        back_populates="post",
        order_by="Comment.created_at",
        cascade="all, delete-orphan",
    )

    tags: AssociationProxy[list[str]] = association_proxy(
        "tag_rows",
        "name",
        creator=lambda name: PostTag(name=name),
    )

    @property
    def likes(self) -> list[str]:
        """Return the ids of users who liked the post, in like order."""
        return [like.user_id for like in self.like_rows]

    @property
    def like_count(self) -> int:
        return len(self.like_rows)

    @property
    def comment_count(self) -> int:
        return len(self.comments)

    @property
    def status(self) -> str:
        return POST_STATUS_PUBLISHED

    @property
    def published_at(self) -> datetime:
        """Publish time; equal to the creation time for every post."""
        return self.created_at


class PostTag(Base):
    """Ordered tag attached to a post."""

    __tablename__ = "post_tag"

    id: Mapped[int] = mapped_column(Integer, primary_key=True, autoincrement=True)
    post_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    name: Mapped[str] = mapped_column(String(100), nullable=False, index=True)


class PostLike(Base):
    """A user's like on a post."""

    __tablename__ = "post_like"

    # Composite primary key prevents duplicate likes from the same user.
    post_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("post.id", ondelete="CASCADE"),
        primary_key=True,
    )
    user_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("user_account.id", ondelete="CASCADE"),
        primary_key=True,
    )
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )


class Comment(Base):
    """Comment appended to a post."""

    __tablename__ = "comment"

    id: Mapped[str] = mapped_column(String(24), primary_key=True, default=new_object_id)
    post_id: Mapped[str] = mapped_column(
        String(24),
        ForeignKey("post.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    # Null once the commenting account has been deleted.
    author_id: Mapped[str | None] = mapped_column(
        String(24),
        ForeignKey("user_account.id", ondelete="SET NULL"),
        nullable=True,
    )
    content: Mapped[str] = mapped_column(String(1000), nullable=False)
    is_approved: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
    created_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True), nullable=False, default=utcnow
    )

    post: Mapped[Post] = relationship("Post", back_populates="comments")
    author: Mapped[User | None] = relationship("User")
