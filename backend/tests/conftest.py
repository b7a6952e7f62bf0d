"""
Shared fixtures for API and service tests.

Required settings are set here, before anything imports `taskapi`, so the
config singleton can be built. Each test gets a fresh in-memory SQLite
database wired into the app through a `get_db` override.
"""

from __future__ import annotations

import os

os.environ["DATABASE_URL"] = "sqlite://"
os.environ["JWT_SECRET_KEY"] = "test-secret-key"
os.environ["SMTP_HOST"] = ""
os.environ["BCRYPT_ROUNDS"] = "4"

from typing import Callable, Iterator, Tuple

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from taskapi.core.database import build_engine, get_db, init_db
from taskapi.main import app


@pytest.fixture()
def engine():
    engine = build_engine("sqlite://", poolclass=StaticPool)
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine) -> sessionmaker:
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture()
def db(session_factory) -> Iterator[Session]:
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def client(session_factory) -> Iterator[TestClient]:
    def override_get_db():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    app.dependency_overrides[get_db] = override_get_db
    try:
        yield TestClient(app)
    finally:
        app.dependency_overrides.clear()


@pytest.fixture()
def register(client: TestClient) -> Callable[..., Tuple[dict, str]]:
    """Register a user through the API and return (user_json, token)."""

    def _register(
        name: str = "Ann",
        email: str = "ann@x.com",
        password: str = "mypass1",
        **extra,
    ) -> Tuple[dict, str]:
        response = client.post(
            "/users",
            json={"name": name, "email": email, "password": password, **extra},
        )
        assert response.status_code == 201, response.text
        body = response.json()
        return body["user"], body["token"]

    return _register


@pytest.fixture()
def ann(register) -> Tuple[dict, str]:
    return register()


@pytest.fixture()
def bob(register) -> Tuple[dict, str]:
    return register(name="Bob", email="bob@x.com", password="bobpass1")
