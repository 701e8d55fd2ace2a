import os
import tempfile

# settings are read at import time, so the environment goes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENCODE_KEY"] = "test-encode-key"
os.environ["REDIS_HOST"] = ""
os.environ["UPLOAD_DIR"] = tempfile.mkdtemp(prefix="tipjar-uploads-")
os.environ.pop("TIPJAR_FACTORY_ADDRESS", None)
os.environ.pop("RPC_URL", None)

import pytest
from eth_account import Account
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool
from typing import Callable, Dict, Generator

from main import app
from tipjar.client.wallet import sign_message
from tipjar.core.cache import cache_manager
from tipjar.db.base import Base
from tipjar.db.session import get_db
from tipjar.models import comment, content, like  # noqa: F401


# Create in-memory SQLite database for testing
SQLALCHEMY_DATABASE_URL = "sqlite:///:memory:"
engine = create_engine(
    SQLALCHEMY_DATABASE_URL,
    connect_args={"check_same_thread": False},
    poolclass=StaticPool,
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


def override_get_db() -> Generator:
    """Override database dependency for testing"""
    db = TestingSessionLocal()
    try:
        yield db
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@pytest.fixture(autouse=True)
def clean_state():
    """Fresh tables and an empty cache for every test"""
    Base.metadata.create_all(bind=engine)
    cache_manager.clear()
    yield
    cache_manager.clear()
    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session():
    db = TestingSessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture
def client() -> TestClient:
    """Create a test client for the FastAPI application"""
    app.dependency_overrides[get_db] = override_get_db
    with TestClient(app) as test_client:
        yield test_client
    app.dependency_overrides.clear()


@pytest.fixture
def make_account():
    """Factory for throwaway wallets"""
    return Account.create


def _login(client: TestClient, account) -> str:
    """Run the nonce/sign/verify handshake and return the session token"""
    nonce_res = client.post("/api/auth/nonce", json={"address": account.address})
    assert nonce_res.status_code == 200, nonce_res.text
    signature = sign_message(account, nonce_res.json()["message"])
    verify_res = client.post(
        "/api/auth/verify",
        json={"address": account.address, "signature": signature},
    )
    assert verify_res.status_code == 200, verify_res.text
    return verify_res.json()["token"]


@pytest.fixture
def login(client: TestClient) -> Callable[..., str]:
    return lambda account: _login(client, account)


@pytest.fixture
def auth_headers(client: TestClient, make_account) -> Callable[..., Dict[str, str]]:
    """Log a wallet in and return its Authorization header"""

    def _headers(account=None) -> Dict[str, str]:
        account = account or make_account()
        return {"Authorization": f"Bearer {_login(client, account)}"}

    return _headers


@pytest.fixture
def create_content(client: TestClient):
    """Publish a content item as the wallet behind ``headers``"""

    def _create(headers: Dict[str, str], **overrides) -> dict:
        body = {
            "category": "music",
            "title": "First single",
            "description": "Recorded live",
            "mediaUrl": "/uploads/song.mp3",
        }
        body.update(overrides)
        response = client.post("/api/content/upload", json=body, headers=headers)
        assert response.status_code == 201, response.text
        return response.json()

    return _create
