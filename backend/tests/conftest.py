import os

# Settings are read at import time
os.environ.setdefault("JWT_SECRET_KEY", "test-secret-key")
os.environ.setdefault("DATABASE_URL", "sqlite:///:memory:")
os.environ.setdefault("ENVIRONMENT", "test")
os.environ.setdefault("HASH_ROUNDS", "4")
os.environ.setdefault("STRUCTURED_LOGGING", "false")

import pytest
from sqlalchemy import create_engine, event
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from redis.exceptions import ConnectionError as RedisConnectionError

from tenantdesk.core.database import Base, get_db
from tenantdesk.exceptions import MailDeliveryError
from tenantdesk.main import app
from tenantdesk.config import settings
from tenantdesk.services import StorageService
from tenantdesk import models  # noqa: F401

# Starlette's TestClient and recent httpx releases disagree on the client
# constructor, so requests go through httpx directly with ASGITransport
import httpx
from httpx import ASGITransport
import asyncio


class CompatibleTestClient:
    """Compatible test client that works around httpx/Starlette version issues"""
    def __init__(self, app):
        self.app = app
        # Unhandled errors still produce the 500 envelope instead of raising in the test
        self.transport = ASGITransport(app=app, raise_app_exceptions=False)
        self.base_url = "http://testserver"

    def _run_async(self, coro):
        """Run async coroutine in event loop"""
        try:
            loop = asyncio.get_event_loop()
            if loop.is_closed():
                loop = asyncio.new_event_loop()
                asyncio.set_event_loop(loop)
        except RuntimeError:
            loop = asyncio.new_event_loop()
            asyncio.set_event_loop(loop)
        return loop.run_until_complete(coro)

    def request(self, method, url, **kwargs):
        async def _request():
            async with httpx.AsyncClient(transport=self.transport, base_url=self.base_url) as client:
                return await client.request(method, url, **kwargs)
        return self._run_async(_request())

    def post(self, url, **kwargs):
        return self.request("POST", url, **kwargs)

    def get(self, url, **kwargs):
        return self.request("GET", url, **kwargs)

    def put(self, url, **kwargs):
        return self.request("PUT", url, **kwargs)

    def delete(self, url, **kwargs):
        return self.request("DELETE", url, **kwargs)


TestClient = CompatibleTestClient

# Create test database
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"

engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)


@event.listens_for(engine, "connect")
def enable_foreign_keys(dbapi_conn, connection_record):
    cursor = dbapi_conn.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class FakeCache:
    """In-memory stand-in for the redis cache client"""

    def __init__(self):
        self.store = {}
        self.available = True
        self.closed = False

    def ping(self):
        if not self.available:
            raise RedisConnectionError("cache unreachable")
        return True

    def delete_prefix(self, prefix):
        keys = [key for key in self.store if key.startswith(prefix)]
        for key in keys:
            del self.store[key]
        return len(keys)

    def close(self):
        self.closed = True


class FakeMailClient:
    """Records outgoing mail instead of calling Mailgun"""

    def __init__(self):
        self.sent = []
        self.fail = False

    @property
    def enabled(self):
        return True

    def send(self, to, subject, html):
        if self.fail:
            raise MailDeliveryError()
        self.sent.append({"to": to, "subject": subject, "html": html})
        return True

    def close(self):
        pass


@pytest.fixture
def db():
    """Create a test database session"""
    Base.metadata.create_all(bind=engine)
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()
        Base.metadata.drop_all(bind=engine)


@pytest.fixture
def storage(tmp_path):
    return StorageService(tmp_path / "uploads")


@pytest.fixture
def cache():
    return FakeCache()


@pytest.fixture
def mail():
    return FakeMailClient()


@pytest.fixture
def logs_directory(tmp_path, monkeypatch):
    directory = tmp_path / "logs"
    monkeypatch.setattr(settings, "logs_directory", str(directory))
    return directory


@pytest.fixture
def client(db, storage, cache, mail, logs_directory):
    """Create a test client"""
    def override_get_db():
        try:
            yield db
        finally:
            pass

    app.dependency_overrides[get_db] = override_get_db
    app.state.session_factory = TestingSessionLocal
    app.state.storage = storage
    app.state.cache = cache
    app.state.mail = mail
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def auth_token(client):
    """Register a user and return its access token"""
    response = client.post(
        "/api/auth/register",
        json={"email": "owner@example.com", "password": "testpassword123", "name": "Owner"}
    )
    return response.json()["data"]["token"]


@pytest.fixture
def auth_headers(auth_token):
    return {"Authorization": f"Bearer {auth_token}"}


@pytest.fixture
def current_user_id(client, auth_headers):
    response = client.get("/api/users/email/owner@example.com", headers=auth_headers)
    return response.json()["data"]["id"]
