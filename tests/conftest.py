# tests/conftest.py
from __future__ import annotations

import os
from collections.abc import Callable, Generator, Iterator
from datetime import datetime, timedelta
from itertools import count
from typing import Any

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.engine import Engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

os.environ.setdefault("PYTEST_RUNNING", "true")

from stumble_higher.core.security import create_access_token
from stumble_higher.db.session import Base
from stumble_higher.db.session import get_db as app_get_session
from stumble_higher.db.time import utcnow
from stumble_higher.main import app as fastapi_app
from stumble_higher.models import Resource, User, UserInteraction, Vote
from stumble_higher.models.resource import RESOURCE_STATUS_APPROVED
from stumble_higher.services import events
from stumble_higher.services.system_config import seed_default_config

TEST_DB_URL = "sqlite://"

_USER_COUNTER = count(1)
_RESOURCE_COUNTER = count(1)


@pytest.fixture(scope="session")
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
def db_session(engine: Engine) -> Iterator[Session]:
    # Services commit and roll back on their own, so each test gets a plain
    # session and the tables are emptied afterwards.
    SessionLocal = sessionmaker(
        bind=engine,
        autocommit=False,
        autoflush=False,
        expire_on_commit=False,
    )
    session = SessionLocal()
    try:
        yield session
    finally:
        session.rollback()
        session.close()

        with engine.begin() as cleanup_conn:
            for table in reversed(Base.metadata.sorted_tables):
                cleanup_conn.execute(table.delete())


@pytest.fixture()
def seeded_config(db_session: Session) -> Session:
    """Write the default ``system_config`` rows."""
    seed_default_config(db_session)
    return db_session


@pytest.fixture(autouse=True)
def restore_event_handlers() -> Iterator[None]:
    handlers = list(events._handlers)
    try:
        yield
    finally:
        events._handlers[:] = handlers


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


@pytest.fixture()
def make_user(db_session: Session) -> Callable[..., User]:
    """Factory persisting users with the given attributes."""

    def _make_user(**overrides: Any) -> User:
        n = next(_USER_COUNTER)
        fields: dict[str, Any] = {"username": f"user{n}", "display_name": f"User {n}"}
        fields.update(overrides)
        user = User(**fields)
        db_session.add(user)
        db_session.commit()
        return user

    return _make_user


@pytest.fixture()
def make_resource(db_session: Session) -> Callable[..., Resource]:
    """Factory persisting resources; approved by default."""

    def _make_resource(**overrides: Any) -> Resource:
        n = next(_RESOURCE_COUNTER)
        fields: dict[str, Any] = {
            "title": f"Resource {n}",
            "url": f"https://example.com/resource/{n}",
            "category": "articles",
            "tags": [],
            "status": RESOURCE_STATUS_APPROVED,
        }
        fields.update(overrides)
        resource = Resource(**fields)
        db_session.add(resource)
        db_session.commit()
        return resource

    return _make_resource


@pytest.fixture()
def add_vote(db_session: Session) -> Callable[..., Vote]:
    """Insert a vote row directly, bypassing the voting pipeline."""

    def _add_vote(resource: Resource, user: User, vote_type: str = "up", **overrides: Any) -> Vote:
        vote = Vote(resource_id=resource.id, user_id=user.id, vote_type=vote_type, **overrides)
        db_session.add(vote)
        db_session.commit()
        return vote

    return _add_vote


@pytest.fixture()
def add_interaction(db_session: Session) -> Callable[..., UserInteraction]:
    """Insert an interaction row, optionally backdated."""

    def _add_interaction(
        resource: Resource,
        user: User | None = None,
        interaction_type: str = "view",
        *,
        age: timedelta = timedelta(0),
        session_id: str | None = None,
    ) -> UserInteraction:
        interaction = UserInteraction(
            resource_id=resource.id,
            user_id=user.id if user else None,
            session_id=session_id,
            interaction_type=interaction_type,
            created_at=utcnow() - age,
        )
        db_session.add(interaction)
        db_session.commit()
        return interaction

    return _add_interaction


@pytest.fixture()
def test_user(make_user: Callable[..., User]) -> User:
    """Primary authenticated user."""
    return make_user(username="tester", display_name="Test User")


@pytest.fixture()
def other_user(make_user: Callable[..., User]) -> User:
    """Secondary user, typically the submitter of voted resources."""
    return make_user(username="other", display_name="Other User")


@pytest.fixture()
def admin_user(make_user: Callable[..., User]) -> User:
    return make_user(username="admin", display_name="Admin", is_admin=True)


def auth_headers(user: User) -> dict[str, str]:
    return {"Authorization": f"Bearer {create_access_token(user.id)}"}


@pytest.fixture()
def auth_token(test_user: User) -> dict[str, str]:
    """Return authorization headers for the primary test user."""
    return auth_headers(test_user)


@pytest.fixture()
def admin_token(admin_user: User) -> dict[str, str]:
    """Return authorization headers for the admin user."""
    return auth_headers(admin_user)


@pytest.fixture()
def now() -> datetime:
    return utcnow()


@pytest.fixture()
def headers_for() -> Callable[[User], dict[str, str]]:
    """Build bearer headers for an arbitrary user."""
    return auth_headers
