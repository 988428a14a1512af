import os

# Settings are read at import time
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["SUPABASE_URL"] = "https://supabase.test"
os.environ["SUPABASE_ANON_KEY"] = "anon-key"
os.environ["SUPABASE_SERVICE_ROLE_KEY"] = "service-role-key"
os.environ["VERCEL_TOKEN"] = ""
os.environ["VERCEL_TEAM_ID"] = ""

import json
from types import SimpleNamespace

import pytest
from fastapi.testclient import TestClient
from supabase import AuthError as SupabaseAuthError

from app.api.deps import (
    get_browser_gateway,
    get_code_generation_service,
    get_service_client,
    get_vercel_service,
)
from app.database import Base, SessionLocal, engine, get_db
from app.main import app
from app.services.ai_service import CodeGenerationService
from app.services.supabase_service import BrowserGateway, ServiceGateway
from app.services.vercel_service import VercelService

USERS = {
    "token-alice": SimpleNamespace(id="user-alice", email="alice@example.com", user_metadata={"full_name": "Alice"}),
    "token-bob": SimpleNamespace(id="user-bob", email="bob@example.com", user_metadata={}),
}

VALID_ARTIFACT = {
    "files": [
        {
            "path": "index.html",
            "content": "<!DOCTYPE html><html><body><div id=\"root\"></div></body></html>",
            "language": "html",
        }
    ],
    "dependencies": {},
    "framework": "react",
}


class FakeSupabaseError(SupabaseAuthError):
    def __init__(self, message):
        Exception.__init__(self, message)
        self.message = message


class FakeAuth:
    def __init__(self):
        self.signed_out = []
        self.reset_emails = []
        self.session = None

    def get_user(self, token):
        user = USERS.get(token)
        if user is None:
            raise FakeSupabaseError("invalid JWT")
        return SimpleNamespace(user=user)

    def sign_up(self, credentials):
        if credentials["email"] == "taken@example.com":
            raise FakeSupabaseError("User already registered")
        user = SimpleNamespace(
            id="user-new",
            email=credentials["email"],
            user_metadata=credentials["options"]["data"],
        )
        return SimpleNamespace(user=user, session=None)

    def sign_in_with_password(self, credentials):
        if credentials["password"] != "correct-password":
            raise FakeSupabaseError("Invalid login credentials")
        session = SimpleNamespace(access_token="token-alice", refresh_token="refresh-alice", expires_in=3600)
        return SimpleNamespace(user=USERS["token-alice"], session=session)

    def set_session(self, access_token, refresh_token):
        if access_token not in USERS:
            raise FakeSupabaseError("Session expired")
        self.session = (access_token, refresh_token)

    def sign_out(self):
        self.signed_out.append(self.session)
        self.session = None

    def reset_password_for_email(self, email, options):
        self.reset_emails.append((email, options))


class FakeSupabaseClient:
    def __init__(self):
        self.auth = FakeAuth()


class FakeMessages:
    def __init__(self, owner):
        self.owner = owner

    async def create(self, **kwargs):
        self.owner.calls.append(kwargs)
        if self.owner.error is not None:
            raise self.owner.error
        return SimpleNamespace(content=[SimpleNamespace(type="text", text=self.owner.response_text)])


class FakeAnthropic:
    """Stands in for AsyncAnthropic; answers every request with response_text"""

    def __init__(self, response_text=None, error=None):
        self.response_text = json.dumps(VALID_ARTIFACT) if response_text is None else response_text
        self.error = error
        self.calls = []
        self.messages = FakeMessages(self)


class FakeClock:
    """Monotonic clock that only moves when sleep is awaited"""

    def __init__(self):
        self.now = 0.0
        self.sleeps = []

    def __call__(self):
        return self.now

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        self.now += seconds


@pytest.fixture
def db_session():
    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)
    session = SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def supabase_client():
    return FakeSupabaseClient()


@pytest.fixture
def gateway(supabase_client, db_session):
    return ServiceGateway(supabase_client, db_session)


@pytest.fixture
def anthropic_client():
    return FakeAnthropic()


@pytest.fixture
def generator(anthropic_client):
    return CodeGenerationService(client=anthropic_client)


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def mock_deployer(clock):
    """Deployer without a Vercel token, so the mock path is used"""
    return VercelService(token="", sleep=clock.sleep, clock=clock)


@pytest.fixture
def alice():
    from app.schemas import AuthUser
    return AuthUser(id="user-alice", email="alice@example.com")


@pytest.fixture
def bob():
    from app.schemas import AuthUser
    return AuthUser(id="user-bob", email="bob@example.com")


@pytest.fixture
def client(db_session, supabase_client, generator, mock_deployer):
    app.dependency_overrides[get_db] = lambda: db_session
    app.dependency_overrides[get_service_client] = lambda: supabase_client
    app.dependency_overrides[get_browser_gateway] = lambda: BrowserGateway(client_factory=lambda: supabase_client)
    app.dependency_overrides[get_code_generation_service] = lambda: generator
    app.dependency_overrides[get_vercel_service] = lambda: mock_deployer

    with TestClient(app, raise_server_exceptions=False) as test_client:
        yield test_client

    app.dependency_overrides.clear()
