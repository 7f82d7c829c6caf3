"""
Test configuration and fixtures for the shortlink service.
This centralizes all test setup, making individual tests clean.
"""

import os

# Must be set before anything imports shortlink_app.config
os.environ["DATABASE_URL"] = "sqlite:///./test_app.db"
os.environ["CACHE_BACKEND"] = "memory"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["BASE_URL"] = "http://testserver"
os.environ["LOG_LEVEL"] = "WARNING"

import asyncio

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.orm import sessionmaker

from main import app
from shortlink_app.cache.strategies import InMemoryCache
from shortlink_app.database.connection import Base, build_engine, get_db, get_session_factory
from shortlink_app.dependencies import get_cache
from shortlink_app.models.user import User
from shortlink_app.services.identity_service import IdentityStore
from shortlink_app.services.link_registry import LinkRegistry

# Test database configuration
SQLALCHEMY_DATABASE_URL = "sqlite:///./test.db"
engine = build_engine(SQLALCHEMY_DATABASE_URL)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture(scope="function")
def db_session():
    """
    Create a fresh database for each test and hand out one session on it.
    """
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()

    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture(scope="function")
def session_factory(db_session):
    """Factory for extra sessions on the same test database (one per thread)"""
    return TestingSessionLocal


@pytest.fixture(scope="function")
def cache():
    return InMemoryCache()


@pytest.fixture(scope="function")
def client(db_session, cache):
    """
    Create a test client with database, session factory and cache overridden.
    Every request gets its own session, as in production.
    """
    def override_get_db():
        db = TestingSessionLocal()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_session_factory] = lambda: TestingSessionLocal
    app.dependency_overrides[get_cache] = lambda: cache

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _make_user(db, username: str) -> str:
    user = User(username=username, password_hash="not-a-real-hash")
    db.add(user)
    db.commit()
    return user.id


@pytest.fixture
def owner_id(db_session):
    return _make_user(db_session, "owner")


@pytest.fixture
def other_owner_id(db_session):
    return _make_user(db_session, "someone-else")


@pytest.fixture
def registry(db_session, cache):
    return LinkRegistry(db=db_session, cache=cache)


@pytest.fixture
def identity(db_session):
    return IdentityStore(db=db_session, bcrypt_rounds=4)


def register_user(client: TestClient, username: str = "alice", password: str = "secret1") -> dict:
    response = client.post("/api/register", json={"username": username, "password": password})
    assert response.status_code == 200, response.text
    return response.json()


@pytest.fixture
def auth_headers(client):
    """Authorization header for a freshly registered user"""
    token = register_user(client)["token"]
    return {"Authorization": f"Bearer {token}"}


def run(coro):
    """Run a store coroutine from sync test code"""
    return asyncio.run(coro)
