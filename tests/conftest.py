import os

from tests.test_utils import FAST_PARAMETERS, TEST_SECRET

os.environ.setdefault("SECRET_KEY", TEST_SECRET)

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

import restapi.main as main_module  # noqa: E402
from restapi.database import Base, get_db  # noqa: E402
from restapi.dependencies import get_hasher, get_token_service  # noqa: E402
from restapi.main import app  # noqa: E402
from restapi.middleware.rate_limit import limiter  # noqa: E402
from restapi.models.user import User  # noqa: E402, F401
from restapi.services.hasher import Hasher  # noqa: E402
from restapi.services.token_service import TokenService  # noqa: E402


@pytest.fixture
def db_session():
    """Create a fresh in-memory database for each test."""
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)

    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def hasher():
    return Hasher(FAST_PARAMETERS)


@pytest.fixture
def token_service():
    return TokenService(TEST_SECRET)


@pytest.fixture
def client(db_session, hasher, token_service):
    """Test client with the test database, cheap hashing and rate limiting off."""

    def override_get_db():
        try:
            yield db_session
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_hasher] = lambda: hasher
    app.dependency_overrides[get_token_service] = lambda: token_service

    limiter.enabled = False

    # Point the startup table check at the test database
    original_engine = main_module.engine
    main_module.engine = db_session.get_bind()

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    limiter.enabled = True
    main_module.engine = original_engine


@pytest.fixture
def signup_payload():
    return {
        "username": "alice",
        "email": "alice@example.com",
        "password": "password123",
        "confirm_password": "password123",
    }


@pytest.fixture
def auth_headers(client, signup_payload):
    """Sign up the default user and return its Authorization header."""
    response = client.post("/api/v1/auth/signup", json=signup_payload)
    assert response.status_code == 200
    return {"Authorization": f"Bearer {response.json()['token']}"}
