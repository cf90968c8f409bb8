# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from itertools import count

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("CREATE_TABLES_ON_STARTUP", "false")

from blogger.core.security import create_access_token, hash_password
from blogger.db.session import Base
from blogger.db.session import get_db as app_get_session
from blogger.main import app as fastapi_app
from blogger.models import Comment, Post, User
from blogger.services import comments as comment_service
from blogger.services import posts as post_service

TEST_DB_URL = "sqlite://"
TEST_PASSWORD = "password123"
TEST_PASSWORD_HASH = hash_password(TEST_PASSWORD)


@pytest.fixture()
def engine() -> Generator[Engine, None, None]:
    engine = create_engine(
        TEST_DB_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    try:
        yield engine
    finally:
        Base.metadata.drop_all(bind=engine)
        engine.dispose()


@pytest.fixture()
def session_factory(engine: Engine) -> sessionmaker[Session]:
    """Sessions bound to the per-test in-memory database."""
    return sessionmaker(bind=engine, autocommit=False, autoflush=False)


@pytest.fixture()
def db_session(session_factory: sessionmaker[Session]) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


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


def bearer(user: User) -> dict[str, str]:
    """Return authorization headers for ``user``."""
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Return a factory persisting users with the shared test password."""
    numbers = count(1)

    def _make(username: str | None = None, **fields: object) -> User:
        name = username or f"user{next(numbers)}"
        user = User(
            username=name,
            email=f"{name}@example.com",
            password_hash=TEST_PASSWORD_HASH,
            full_name=str(fields.pop("full_name", name.title())),
            **fields,
        )
        db_session.add(user)
        db_session.commit()
        db_session.refresh(user)
        return user

    return _make


@pytest.fixture()
def alice(make_user: Callable[..., User]) -> User:
    return make_user("alice")


@pytest.fixture()
def bob(make_user: Callable[..., User]) -> User:
    return make_user("bob")


@pytest.fixture()
def carol(make_user: Callable[..., User]) -> User:
    return make_user("carol")


@pytest.fixture()
def alice_headers(alice: User) -> dict[str, str]:
    return bearer(alice)


@pytest.fixture()
def bob_headers(bob: User) -> dict[str, str]:
    return bearer(bob)


@pytest.fixture()
def make_post(db_session: Session) -> Callable[..., Post]:
    """Return a factory creating posts through the post service."""

    def _make(author: User, status: str = "published", **fields: object) -> Post:
        return post_service.create_post(
            db_session,
            author_id=author.id,
            title=str(fields.pop("title", "A post")),
            content=str(fields.pop("content", "Some words worth reading.")),
            status=status,
            **fields,
        )

    return _make


@pytest.fixture()
def post(make_post: Callable[..., Post], alice: User) -> Post:
    """A published post authored by alice."""
    return make_post(alice, title="Hello world")


@pytest.fixture()
def draft_post(make_post: Callable[..., Post], alice: User) -> Post:
    """A draft post authored by alice."""
    return make_post(alice, status="draft", title="Work in progress")


@pytest.fixture()
def comment(db_session: Session, post: Post, bob: User) -> Comment:
    """A top-level comment by bob on alice's post."""
    return comment_service.create_comment(db_session, bob.id, post.id, "Nice post!")
