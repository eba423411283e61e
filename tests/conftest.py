"""
Test configuration for pytest
"""

import pytest
import os
from unittest.mock import Mock
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool
from sqlmodel import SQLModel, Session
from typing import Generator

# Test environment variables
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["JWT_SECRET_KEY"] = "test-jwt-secret"
os.environ["STRIPE_SECRET_KEY"] = "sk_test_porchboard"
os.environ["STRIPE_WEBHOOK_SECRET"] = "whsec_test_porchboard"
os.environ["RATE_LIMIT_ENABLED"] = "false"
os.environ["AWS_S3_BUCKET"] = "porchboard-test"

from fastapi.testclient import TestClient  # noqa: E402

from porchboard.core.auth import create_access_token, hash_password  # noqa: E402
from porchboard.core.config import get_settings  # noqa: E402
from porchboard.core.database import get_session  # noqa: E402
from porchboard.main import app  # noqa: E402
from porchboard.models import City, SubscriptionTier, User, UserRole  # noqa: E402
from porchboard.services.storage import MediaStorage, get_media_storage  # noqa: E402

TEST_PASSWORD = "password123"


# Single shared connection so every session sees the same in-memory database
test_engine = create_engine(
    "sqlite:///:memory:",
    echo=False,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@pytest.fixture(scope="function")
def db() -> Generator[Session, None, None]:
    """Create a clean database session for each test"""
    # Create all tables
    SQLModel.metadata.create_all(test_engine)

    # Create session
    with Session(test_engine) as session:
        yield session

    # Cleanup
    SQLModel.metadata.drop_all(test_engine)


@pytest.fixture
def s3_client() -> Mock:
    """Stand-in for the boto3 S3 client"""
    return Mock()


@pytest.fixture
def storage(s3_client: Mock) -> MediaStorage:
    return MediaStorage(settings=get_settings(), client=s3_client)


@pytest.fixture
def client(db: Session, storage: MediaStorage) -> Generator[TestClient, None, None]:
    """API client bound to the test database and mocked media storage"""
    def override_get_session():
        yield db

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_media_storage] = lambda: storage

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def make_city(db: Session, name: str, domain: str, **kwargs) -> City:
    city = City(
        name=name,
        slug=name.lower().replace(" ", "-"),
        domain=domain,
        branding={
            "primary_color": "#1D4ED8",
            "secondary_color": "#F59E0B",
            "font": "Inter",
            "footer_text": f"{name} community events",
        },
        **kwargs,
    )
    db.add(city)
    db.commit()
    db.refresh(city)
    return city


def make_user(db: Session, city: City, email: str, role: UserRole, name: str = "Test User") -> User:
    user = User(
        city_id=city.id,
        email=email,
        password_hash=hash_password(TEST_PASSWORD),
        name=name,
        role=role,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def auth_headers(user: User) -> dict:
    """Bearer header for a stored user"""
    token = create_access_token(user_id=user.id, city_id=user.city_id, role=user.role.value)
    return {"Authorization": f"Bearer {token}"}


# Fixtures
@pytest.fixture
def test_city(db: Session) -> City:
    """Create a test city"""
    return make_city(db, "Springfield", "events.springfield.com")


@pytest.fixture
def other_city(db: Session) -> City:
    """Create a second city to check tenant isolation"""
    return make_city(db, "Shelbyville", "events.shelbyville.com", subscription_tier=SubscriptionTier.PRO)


@pytest.fixture
def test_admin(db: Session, test_city: City) -> User:
    return make_user(db, test_city, "admin@springfield.com", UserRole.ADMIN, name="Marge Admin")


@pytest.fixture
def test_creator(db: Session, test_city: City) -> User:
    return make_user(db, test_city, "creator@springfield.com", UserRole.EVENT_CREATOR, name="Ned Creator")


@pytest.fixture
def other_admin(db: Session, other_city: City) -> User:
    return make_user(db, other_city, "admin@shelbyville.com", UserRole.ADMIN, name="Shelby Admin")
