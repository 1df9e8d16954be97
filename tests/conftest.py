"""Test configuration and fixtures."""
import os

# Must be set before the app module builds its settings
os.environ.setdefault("JWT_SECRET", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite+aiosqlite://")

import pytest
import pytest_asyncio
from httpx import ASGITransport, AsyncClient
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker, create_async_engine
from sqlalchemy.pool import NullPool

from storefront.config import settings
from storefront.core.exceptions import EmailDeliveryError
from storefront.database import get_db
from storefront.main import app
from storefront.models import Base
from storefront.services.email import EmailService, get_email_service
from storefront.services.user import UserRepository


class FakeEmailService(EmailService):
    """Renders real templates but keeps messages in an outbox."""

    def __init__(self):
        super().__init__(settings.mail)
        self.outbox = []
        self.reset_secrets = []
        self.fail = False

    async def send(self, kind: str, to: str, subject: str, html: str) -> None:
        if self.fail:
            raise EmailDeliveryError(f"{kind} email to {to} failed: smtp down")
        self.outbox.append({"kind": kind, "to": to, "subject": subject, "html": html})

    async def send_password_reset_email(self, name: str, email: str, plain_secret: str) -> None:
        self.reset_secrets.append(plain_secret)
        await super().send_password_reset_email(name, email, plain_secret)


@pytest_asyncio.fixture
async def async_engine(tmp_path):
    """Create async engine for tests."""
    engine = create_async_engine(
        f"sqlite+aiosqlite:///{tmp_path / 'test.db'}",
        poolclass=NullPool,
    )

    # Create tables
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    yield engine

    await engine.dispose()


@pytest.fixture
def session_factory(async_engine):
    return async_sessionmaker(async_engine, class_=AsyncSession, expire_on_commit=False)


@pytest_asyncio.fixture
async def async_session(session_factory):
    """Create async session for tests."""
    async with session_factory() as session:
        yield session


@pytest.fixture
def email_service():
    return FakeEmailService()


@pytest_asyncio.fixture
async def client(session_factory, email_service):
    """HTTP client with database and email dependencies overridden."""

    async def override_get_db():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: email_service

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as test_client:
        yield test_client

    app.dependency_overrides.clear()


async def _create_user(session_factory, name, email, password, role="user"):
    async with session_factory() as session:
        return await UserRepository(session).create(name, email, password, role=role)


@pytest_asyncio.fixture
async def test_user(session_factory):
    """Create test user."""
    return await _create_user(session_factory, "Test User", "test@example.com", "testpassword123")


@pytest_asyncio.fixture
async def other_user(session_factory):
    return await _create_user(session_factory, "Other User", "other@example.com", "otherpassword123")


@pytest_asyncio.fixture
async def admin_user(session_factory):
    """Create admin user."""
    return await _create_user(
        session_factory, "Admin User", "admin@example.com", "adminpassword123", role="admin"
    )


def _bearer(user):
    token = app.state.token_codec.issue(user.id, user.role)
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def auth_headers(test_user):
    """Create authorization headers for test user."""
    return _bearer(test_user)


@pytest.fixture
def other_headers(other_user):
    return _bearer(other_user)


@pytest.fixture
def admin_headers(admin_user):
    """Create authorization headers for admin user."""
    return _bearer(admin_user)
