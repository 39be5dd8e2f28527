"""
Test configuration and fixtures for CompanyHub backend tests.
"""
import os

# Set test environment BEFORE any imports
os.environ["ENVIRONMENT"] = "test"
os.environ["RATE_LIMIT_ENABLED"] = "0"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ.setdefault("JWT_SECRET", "test-jwt-secret-key-for-testing-only-0123456789")
os.environ["DATABASE_URL"] = "sqlite+aiosqlite:///:memory:"

import itertools
import pytest
import pytest_asyncio
from typing import Any, AsyncGenerator, Dict
from unittest.mock import AsyncMock

from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine

from app.database import get_db
from app.main import app
from app.models.user import Base
from app.models.company import CompanyProfile  # noqa: F401
from app.models.audit_log import AuditLog  # noqa: F401
from app.services.identity_provider import FirebaseIdentityProvider, get_identity_provider
from app.services.media_service import CloudinaryMediaStore, UploadedImage, get_media_store


@pytest_asyncio.fixture
async def test_engine(tmp_path):
    """A fresh SQLite database file per test."""
    engine = create_async_engine(f"sqlite+aiosqlite:///{tmp_path / 'test.db'}", echo=False)
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield engine
    await engine.dispose()


@pytest.fixture
def session_factory(test_engine):
    return async_sessionmaker(bind=test_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def test_db_session(session_factory) -> AsyncGenerator[AsyncSession, None]:
    async with session_factory() as session:
        yield session


@pytest.fixture
def mock_identity():
    """Firebase stand-in: every created identity gets a distinct uid."""
    identity = AsyncMock(spec=FirebaseIdentityProvider)
    counter = itertools.count(1)
    identity.create_identity.side_effect = lambda *args, **kwargs: f"fb-uid-{next(counter)}"
    identity.send_email_verification.return_value = True
    identity.delete_identity.return_value = None
    return identity


@pytest.fixture
def mock_media():
    media = AsyncMock(spec=CloudinaryMediaStore)
    counter = itertools.count(1)

    def _upload(content, folder, public_id):
        n = next(counter)
        return UploadedImage(
            url=f"https://res.cloudinary.com/demo/image/upload/{folder}/{public_id}-{n}.png",
            public_id=f"{folder}/{public_id}-{n}",
        )

    media.upload_image.side_effect = _upload
    media.delete_image.return_value = True
    return media


@pytest_asyncio.fixture
async def async_client(session_factory, mock_identity, mock_media) -> AsyncGenerator[AsyncClient, None]:
    """An async test client wired to the per-test database and the fake providers."""

    async def override_get_db():
        async with session_factory() as session:
            yield session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_identity_provider] = lambda: mock_identity
    app.dependency_overrides[get_media_store] = lambda: mock_media

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def sample_user_data() -> Dict[str, Any]:
    """Sample registration payload."""
    return {
        "email": "alice@x.io",
        "password": "Str0ngPass",
        "full_name": "Alice",
        "gender": "female",
        "mobile_no": "+15550001111",
    }


@pytest.fixture
def sample_company_data() -> Dict[str, Any]:
    return {
        "company_name": "Acme Corp",
        "address": "1 Infinite Loop",
        "city": "Cupertino",
        "state": "CA",
        "country": "USA",
        "postal_code": "95014",
        "website": "https://acme.example",
        "industry": "Manufacturing",
        "founded_date": "2001-04-01",
        "description": "Makes everything",
        "social_links": {"linkedin": "https://linkedin.com/company/acme"},
    }


@pytest_asyncio.fixture
async def registered_user(async_client, sample_user_data) -> Dict[str, Any]:
    """Register the sample user over the API and return the response body."""
    response = await async_client.post("/api/auth/register", json=sample_user_data)
    assert response.status_code == 201, response.text
    return response.json()
