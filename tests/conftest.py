# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator, Sequence
from datetime import datetime, timedelta
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "quillpost-test-secret")
os.environ.setdefault("DATABASE_URL", "sqlite://")

from quillpost.core.security import create_access_token  # noqa: E402
from quillpost.db.session import Base, enable_sqlite_foreign_keys  # noqa: E402
from quillpost.db.session import get_db as app_get_session  # noqa: E402
from quillpost.db.time import utcnow  # noqa: E402
from quillpost.main import app as fastapi_app  # noqa: E402
from quillpost.models import Comment, Post, PostLike, User  # noqa: E402
from quillpost.services.post_service import compute_read_time  # noqa: E402
from quillpost.services.slug import slugify  # noqa: E402

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)
_POST_COUNTER = count(1)

# Fixed reference point so ordering tests do not depend on wall-clock ties.
BASE_TIME = datetime(2024, 1, 1, 12, 0, 0)


@pytest.fixture(scope="session")
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    enable_sqlite_foreign_keys(engine)
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def db_session(engine: Engine) -> Iterator[Session]:
    SessionLocal = sessionmaker(bind=engine, autocommit=False, autoflush=False)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()

        # Ensure each test sees a clean database even if commits occurred.
        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture(scope="session")
def app() -> FastAPI:
    return fastapi_app


@pytest.fixture(autouse=True)
def override_session_dependency(app: FastAPI, db_session: Session) -> Iterator[None]:
    def _get_session_override() -> Generator[Session, None, None]:
        yield db_session

    app.dependency_overrides[app_get_session] = _get_session_override
    try:
        yield
    finally:
        app.dependency_overrides.pop(app_get_session, None)


@pytest.fixture()
def client(app: FastAPI) -> Iterator[TestClient]:
    with TestClient(app, base_url="http://test") as test_client:
        yield test_client


def auth_headers_for(user: User) -> dict[str, str]:
    """Return bearer headers for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory that persists users with unique names."""

    def _make_user(
        username: str | None = None,
        *,
        role: str = "user",
        is_active: bool = True,
        first_name: str = "Test",
        last_name: str = "User",
        created_at: datetime | None = None,
    ) -> User:
        n = next(_USER_COUNTER)
        username = username or f"user{n}"
        user = User(
            username=username,
            email=f"{username}@example.com",
            password_hash="not-a-real-hash",
            first_name=first_name,
            last_name=last_name,
            role=role,
            is_active=is_active,
            created_at=created_at or utcnow(),
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Create and return the primary test user."""
    return make_user("alice", first_name="Alice", last_name="Writer")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Create and return a second regular user."""
    return make_user("bob", first_name="Bob", last_name="Reader")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    """Create and return an administrator."""
    return make_user("root", role="admin", first_name="Ada", last_name="Admin")


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers_for(test_user)


@pytest.fixture()
def other_auth_token(other_user: User) -> dict[str, str]:
    """Return authorization headers for the secondary test user."""
    return auth_headers_for(other_user)


@pytest.fixture()
def admin_auth_token(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the administrator."""
    return auth_headers_for(admin_user)


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory that persists posts directly, bypassing the API."""

    def _make_post(
        author: User,
        title: str | None = None,
        *,
        content: str = "Some words about something interesting",
        tags: Sequence[str] = (),
        views: int = 0,
        liked_by: Sequence[User] = (),
        created_at: datetime | None = None,
    ) -> Post:
        n = next(_POST_COUNTER)
        title = title or f"Post number {n}"
        created = created_at or BASE_TIME + timedelta(minutes=n)
        post = Post(
            title=title,
            content=content,
            slug=slugify(title),
            author_id=author.id,
            read_time=compute_read_time(content),
            views=views,
            created_at=created,
            updated_at=created,
        )
        post.tags = list(tags)
        for user in liked_by:
            post.like_rows.append(PostLike(user_id=user.id, created_at=created))
        db_session.add(post)
        db_session.commit()
        db_session.refresh(post)
        return post

    return _make_post


@pytest.fixture()
def test_post(make_post: Callable[..., Post], test_user: User) -> Post:
    """Create a baseline post owned by the primary test user."""
    return make_post(
        test_user,
        "Hello World",
        content="one two three",
        tags=["intro", "python"],
    )


@pytest.fixture()
def make_comment(db_session: Session) -> Callable[..., Comment]:
    def _make_comment(post: Post, author: User, content: str = "Nice post") -> Comment:
        comment = Comment(post_id=post.id, author_id=author.id, content=content)
        db_session.add(comment)
        db_session.commit()
        db_session.refresh(comment)
        return comment

    return _make_comment
