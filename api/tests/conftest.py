from __future__ import annotations

import itertools
import os
import tempfile
from pathlib import Path
from typing import Callable, Generator

# Must be set before folio is imported: the engine and JWT settings are read at import time
_TEST_DB = Path(tempfile.mkdtemp(prefix="folio-tests-")) / "folio.db"
os.environ["DATABASE_URL"] = f"sqlite:///{_TEST_DB}"
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key-that-is-at-least-32-characters")
os.environ["FOLIO_RUN_MIGRATIONS"] = "false"
os.environ["FOLIO_SEED_ADMIN_EMAIL"] = ""

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session

from folio.auth import create_access_token
from folio.db import Base, SessionLocal, engine
from folio.main import app
from folio.models import (
    Comment,
    CommentStatus,
    GalleryImage,
    Post,
    PostStatus,
    Role,
    User,
)
from folio.services.roles import Principal


_counter = itertools.count(1)


@pytest.fixture(autouse=True)
def reset_schema() -> None:
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)


@pytest.fixture()
def client() -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture()
def db() -> Generator[Session, None, None]:
    """Create a database session for testing."""
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()


@pytest.fixture()
def make_user(db: Session) -> Callable[..., User]:
    def _make_user(role: Role = Role.viewer, name: str | None = None) -> User:
        n = next(_counter)
        user = User(name=name or f"User {n}", email=f"user{n}@example.com", role=role)
        db.add(user)
        db.commit()
        db.refresh(user)
        return user

    return _make_user


@pytest.fixture()
def admin(make_user) -> User:
    return make_user(Role.admin, name="Admin")


@pytest.fixture()
def editor(make_user) -> User:
    return make_user(Role.editor, name="Editor")


@pytest.fixture()
def viewer(make_user) -> User:
    return make_user(Role.viewer, name="Viewer")


@pytest.fixture()
def admin_principal(admin: User) -> Principal:
    return Principal.from_user(admin)


@pytest.fixture()
def viewer_principal(viewer: User) -> Principal:
    return Principal.from_user(viewer)


@pytest.fixture()
def make_post(db: Session) -> Callable[..., Post]:
    def _make_post(
        status: PostStatus = PostStatus.draft,
        title: str | None = None,
        category: str = "Engineering",
        gallery: int = 0,
    ) -> Post:
        n = next(_counter)
        post = Post(
            slug=f"post-{n}",
            title=title or f"Post {n}",
            content="Some words about a thing worth reading.",
            category=category,
            author="Jane Writer",
            read_time=1,
            status=status,
        )
        db.add(post)
        db.flush()
        db.add_all(
            GalleryImage(post_id=post.id, path=f"/uploads/{n}-{i}.png", position=i)
            for i in range(gallery)
        )
        db.commit()
        db.refresh(post)
        return post

    return _make_post


@pytest.fixture()
def make_comment(db: Session) -> Callable[..., Comment]:
    def _make_comment(
        post: Post,
        parent: Comment | None = None,
        status: CommentStatus = CommentStatus.pending,
        content: str = "Nice post",
    ) -> Comment:
        n = next(_counter)
        comment = Comment(
            post_id=post.id,
            parent_id=parent.id if parent else None,
            depth=parent.depth + 1 if parent else 0,
            name=f"Reader {n}",
            email=f"reader{n}@example.com",
            content=content,
            status=status,
        )
        db.add(comment)
        db.commit()
        db.refresh(comment)
        return comment

    return _make_comment


@pytest.fixture()
def auth_headers() -> Callable[[User], dict[str, str]]:
    def _auth_headers(user: User) -> dict[str, str]:
        return {"Authorization": f"Bearer {create_access_token(user.id)}"}

    return _auth_headers
