"""
Pytest configuration and fixtures.
Provides test database, client, users of every role and a fake API backend
for the client-side tests.
"""

import asyncio
import json
import os
from datetime import datetime, timezone
from typing import AsyncGenerator, Callable, Dict, Generator, List, Optional

# Must be set before the application modules read their settings
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["DISABLE_BOOTSTRAP_USERS"] = "true"

import httpx
import pytest
import pytest_asyncio
from fastapi.testclient import TestClient
from sqlmodel import Session, SQLModel, create_engine
from sqlmodel.pool import StaticPool

from photoshare.client.api import ApiClient
from photoshare.client.session import AuthSession
from photoshare.client.storage import MemoryTokenStorage
from photoshare.core.config import settings
from photoshare.db.session import get_session
from photoshare.main import app
from photoshare.models.user import User, UserRole
from photoshare.schemas.user import UserCreate
from photoshare.services.user_service import UserService

TEST_PASSWORD = "testpassword123"


@pytest.fixture(name="session")
def session_fixture() -> Generator[Session, None, None]:
    """
    Create a test database session.
    Uses an in-memory SQLite database for fast tests.
    """
    engine = create_engine(
        "sqlite:///:memory:",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    SQLModel.metadata.create_all(engine)

    with Session(engine) as session:
        yield session


@pytest.fixture(name="client")
def client_fixture(session: Session) -> Generator[TestClient, None, None]:
    """
    Create a test client with dependency overrides.
    """

    def get_session_override() -> Generator[Session, None, None]:
        yield session

    app.dependency_overrides[get_session] = get_session_override

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


def _create_user(session: Session, email: str, name: str, role: UserRole) -> User:
    user_create = UserCreate(name=name, email=email, password=TEST_PASSWORD)
    return UserService.create(session, user_create, role=role)


@pytest.fixture(name="test_user")
def test_user_fixture(session: Session) -> User:
    """
    Create a test user with the client role.
    """
    return _create_user(session, "test@example.com", "Test User", UserRole.CLIENT)


@pytest.fixture(name="test_photographer")
def test_photographer_fixture(session: Session) -> User:
    return _create_user(session, "photographer@example.com", "Test Photographer", UserRole.PHOTOGRAPHER)


@pytest.fixture(name="test_admin")
def test_admin_fixture(session: Session) -> User:
    """
    Create a test admin user.
    """
    return _create_user(session, "admin@example.com", "Admin User", UserRole.ADMIN)


@pytest.fixture(name="login_as")
def login_as_fixture(client: TestClient) -> Callable[..., str]:
    """
    Log in through the API and return the issued access token.
    """

    def _login(email: str, password: str = TEST_PASSWORD) -> str:
        response = client.post(
            f"{settings.API_PREFIX}/login",
            json={"email": email, "password": password},
        )
        assert response.status_code == 200, response.text
        return response.json()["access_token"]

    return _login


@pytest.fixture(name="user_token")
def user_token_fixture(login_as: Callable[..., str], test_user: User) -> str:
    """
    Get an access token for a client user.
    """
    return login_as(test_user.email)


@pytest.fixture(name="photographer_token")
def photographer_token_fixture(login_as: Callable[..., str], test_photographer: User) -> str:
    return login_as(test_photographer.email)


@pytest.fixture(name="admin_token")
def admin_token_fixture(login_as: Callable[..., str], test_admin: User) -> str:
    """
    Get an access token for an admin user.
    """
    return login_as(test_admin.email)


class FakeBackend:
    """
    Minimal stand-in for the HTTP API, served through httpx.MockTransport.

    Knobs:
        user_status: forces GET /user to answer with this status
        logout_error: makes POST /logout raise a transport error
        user_gate: when set, GET /user waits for the event before answering
    """

    def __init__(self) -> None:
        self.users: Dict[str, dict] = {}
        self.passwords: Dict[str, str] = {}
        self.tokens: Dict[str, str] = {}
        self.requests: List[httpx.Request] = []
        self.user_status: Optional[int] = None
        self.logout_error = False
        self.user_gate: Optional[asyncio.Event] = None
        self._issued = 0

    def add_user(self, email: str, role: UserRole, password: str = TEST_PASSWORD) -> dict:
        now = datetime.now(timezone.utc).isoformat()
        profile = {
            "id": len(self.users) + 1,
            "name": email.split("@")[0],
            "email": email,
            "role": role.value,
            "created_at": now,
            "updated_at": now,
        }
        self.users[email] = profile
        self.passwords[email] = password
        return profile

    def issue(self, email: str) -> str:
        self._issued += 1
        token = f"token-{self._issued}"
        self.tokens[token] = email
        return token

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == f"/api/{path}"]

    def _caller(self, request: httpx.Request) -> Optional[str]:
        header = request.headers.get("Authorization", "")
        if not header.startswith("Bearer "):
            return None
        return self.tokens.get(header[len("Bearer "):])

    async def __call__(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        path = request.url.path.removeprefix("/api/")

        if request.method == "POST" and path == "login":
            body = json.loads(request.content)
            email = body["email"]
            if self.passwords.get(email) != body["password"]:
                return httpx.Response(
                    422,
                    json={"detail": "Invalid credentials.", "errors": {"email": ["Invalid credentials."]}},
                )
            return httpx.Response(
                200,
                json={"access_token": self.issue(email), "token_type": "Bearer", "user": self.users[email]},
            )

        if request.method == "POST" and path == "register":
            body = json.loads(request.content)
            if body["email"] in self.users:
                return httpx.Response(
                    422,
                    json={
                        "detail": "The email has already been taken.",
                        "errors": {"email": ["The email has already been taken."]},
                    },
                )
            profile = self.add_user(body["email"], UserRole(body["role"]), body["password"])
            profile["name"] = body["name"]
            return httpx.Response(
                200,
                json={"access_token": self.issue(body["email"]), "token_type": "Bearer", "user": profile},
            )

        if request.method == "POST" and path == "logout":
            if self.logout_error:
                raise httpx.ConnectError("connection refused", request=request)
            header = request.headers.get("Authorization", "")
            if self._caller(request) is None:
                return httpx.Response(401, json={"detail": "Unauthenticated."})
            del self.tokens[header[len("Bearer "):]]
            return httpx.Response(200, json={"message": "Logged out successfully"})

        if request.method == "GET" and path == "user":
            if self.user_gate is not None:
                await self.user_gate.wait()
            if self.user_status is not None:
                return httpx.Response(self.user_status, json={"detail": "forced"})
            email = self._caller(request)
            if email is None:
                return httpx.Response(401, json={"detail": "Unauthenticated."})
            return httpx.Response(200, json=self.users[email])

        return httpx.Response(404, json={"detail": "Not found."})


@pytest.fixture(name="backend")
def backend_fixture() -> FakeBackend:
    return FakeBackend()


@pytest.fixture(name="storage")
def storage_fixture() -> MemoryTokenStorage:
    return MemoryTokenStorage()


@pytest_asyncio.fixture(name="api")
async def api_fixture(backend: FakeBackend, storage: MemoryTokenStorage) -> AsyncGenerator[ApiClient, None]:
    async with ApiClient("http://testserver/api", storage, transport=httpx.MockTransport(backend)) as api:
        yield api


@pytest.fixture(name="auth_session")
def auth_session_fixture(api: ApiClient) -> AuthSession:
    return AuthSession(api)
