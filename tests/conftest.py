"""
Pytest configuration and fixtures for Volt tests.
"""

import os
from typing import AsyncGenerator, List, Tuple

import httpx
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, create_async_engine, async_sessionmaker
from sqlalchemy.pool import StaticPool

# Tests run with development error bodies; must be set before settings load.
os.environ.setdefault("ENVIRONMENT", "development")

from main import app  # noqa: E402
from volt.core.config import settings  # noqa: E402
from volt.core.database import Base, get_db  # noqa: E402
from volt.models.user import User  # noqa: E402
from volt.services.auth_service import AuthService  # noqa: E402
from volt.services.email_service import EmailService, get_email_service  # noqa: E402
from volt.services.token_service import TokenService  # noqa: E402

# Importing the models registers their tables on Base.metadata
import volt.models  # noqa: F401


# Test database URL (in-memory SQLite for testing)
TEST_DATABASE_URL = "sqlite+aiosqlite:///:memory:"


class RecordingMailer(EmailService):
    """Email service that records password reset tokens instead of sending them."""

    def __init__(self):
        super().__init__(settings)
        self.sent: List[Tuple[str, str]] = []

    async def send_password_reset(self, to: str, token: str) -> None:
        self.sent.append((to, token))

    @property
    def last_token(self) -> str:
        return self.sent[-1][1]


@pytest.fixture(scope="function")
async def db_session() -> AsyncGenerator[AsyncSession, None]:
    """Create a test database session on a fresh in-memory database."""
    engine = create_async_engine(
        TEST_DATABASE_URL,
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)

    session_factory = async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    async with session_factory() as session:
        yield session

    await engine.dispose()


@pytest.fixture
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture
def token_service() -> TokenService:
    return TokenService(settings)


@pytest.fixture(scope="function")
async def client(db_session: AsyncSession, mailer: RecordingMailer) -> AsyncGenerator[httpx.AsyncClient, None]:
    """Create a test client bound to the test session and mailer."""
    async def override_get_db():
        yield db_session

    app.dependency_overrides[get_db] = override_get_db
    app.dependency_overrides[get_email_service] = lambda: mailer

    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture
async def test_user(db_session: AsyncSession) -> User:
    """Create a test user."""
    return await AuthService().create_user(
        username="testuser",
        email="test@example.com",
        password="testpassword123",
        db=db_session
    )


@pytest.fixture
async def other_user(db_session: AsyncSession) -> User:
    """Create a second user for ownership checks."""
    return await AuthService().create_user(
        username="otheruser",
        email="other@example.com",
        password="otherpassword123",
        db=db_session
    )


async def _login(client: httpx.AsyncClient, email: str, password: str) -> dict:
    response = await client.post(
        "/api/v1/auth/login",
        json={"email": email, "password": password}
    )
    assert response.status_code == 200, response.text
    return {"Authorization": f"Bearer {response.json()['token']}"}


@pytest.fixture
def login_as(client: httpx.AsyncClient):
    """Log in through the API and return Bearer headers."""
    async def login(email: str, password: str) -> dict:
        return await _login(client, email, password)
    return login


@pytest.fixture
async def auth_headers(client: httpx.AsyncClient, test_user: User) -> dict:
    """Get authentication headers for test user."""
    return await _login(client, "test@example.com", "testpassword123")


@pytest.fixture
async def other_headers(client: httpx.AsyncClient, other_user: User) -> dict:
    """Get authentication headers for the second user."""
    return await _login(client, "other@example.com", "otherpassword123")
