"""Shared fixtures: in-memory SQLite, fakeredis and a wired TestClient."""

import os

# Configuration is read at import time, so it has to be in place first
os.environ["LOG_PATH"] = ""
os.environ["REDIS_ENABLED"] = "false"
os.environ["JWT_SECRET"] = "test-secret"
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["INGEST_HOUR"] = "8"
os.environ["INGEST_TIMEZONE"] = "Asia/Tokyo"

import fakeredis
import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

import stock_backend.models  # noqa: F401  (registers tables on Base)
from stock_backend.database import Base
from stock_backend.dependencies import get_db_session, get_redis_client, get_token_service
from stock_backend.main import app
from stock_backend.models.user import User
from stock_backend.services import security
from stock_backend.services.security import TokenService, hash_password

TEST_SECRET = "test-secret"


@pytest.fixture(scope="session", autouse=True)
def fast_bcrypt():
    """Keep bcrypt cheap in tests."""
    rounds = security.BCRYPT_ROUNDS
    security.BCRYPT_ROUNDS = 4
    yield
    security.BCRYPT_ROUNDS = rounds


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    yield engine
    Base.metadata.drop_all(engine)
    engine.dispose()


@pytest.fixture
def db(engine):
    session = sessionmaker(autocommit=False, autoflush=False, bind=engine)()
    yield session
    session.close()


@pytest.fixture
def redis_client():
    client = fakeredis.FakeRedis(decode_responses=True)
    yield client
    client.flushall()


@pytest.fixture
def user(db):
    user = User(email="alice@example.com", password=hash_password("correct-horse"))
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET, expires_in=900)


@pytest.fixture(params=["redis", "sql"])
def client(request, db, redis_client, token_service):
    """TestClient wired to the test database; sessions in Redis or in SQL."""
    redis_for_app = redis_client if request.param == "redis" else None

    app.dependency_overrides[get_db_session] = lambda: db
    app.dependency_overrides[get_redis_client] = lambda: redis_for_app
    app.dependency_overrides[get_token_service] = lambda: token_service

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
