"""Schemas for the admin statistics overview."""

from __future__ import annotations

from pydantic import Field

from .common import CamelModel, UTCDateTime


class StatsCounts(CamelModel):
    total_users: int
    total_posts: int
    published_posts: int
    draft_posts: int
    total_comments: int = Field(..., description="Sum of comment counts across all posts")


class RecentUser(CamelModel):
    id: str
    username: str
    first_name: str
    last_name: str
    created_at: UTCDateTime


class RecentPostAuthor(CamelModel):
    id: str
    username: str
    first_name: str
    last_name: str


class RecentPost(CamelModel):
    id: str
    title: str
    slug: str
    published_at: UTCDateTime
    views: int
    author: RecentPostAuthor


class RecentActivity(CamelModel):
    users: list[RecentUser]
    posts: list[RecentPost]


class StatsResponse(CamelModel):
    overview: StatsCounts
    recent: RecentActivity
