"""
Shared fixtures: a throwaway SQLite database, a token issuer, a fake Google
verifier, the FastAPI app with overridden dependencies and an HTTP client
talking to it in-process.
"""

from typing import Any, Dict

import httpx
import pytest
import pytest_asyncio
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from auth.dependencies import get_auth_service, get_token_issuer
from auth.jwt import TokenIssuer
from auth.service import AuthService
from database.models import Base
from database.session import build_engine
from database.user_store import UserStore

TEST_SECRET = "test-secret"
GOOGLE_CLIENT_ID = "client-1.apps.googleusercontent.com"
BCRYPT_TEST_ROUNDS = 4


class FakeGoogleVerifier:
    """Stands in for Google: known credentials map to canned payloads."""

    def __init__(self) -> None:
        self.payloads: Dict[str, Dict[str, Any]] = {}

    def add(self, credential: str, **payload: Any) -> None:
        payload.setdefault("aud", GOOGLE_CLIENT_ID)
        self.payloads[credential] = payload

    async def verify(self, credential: str, audience: str):
        payload = self.payloads.get(credential)
        if payload is None:
            raise ValueError("Could not verify token signature.")
        if payload["aud"] != audience:
            raise ValueError("Token has wrong audience")
        return payload


@pytest_asyncio.fixture
async def session_factory(tmp_path):
    engine = build_engine(f"sqlite+aiosqlite:///{tmp_path / 'auth.db'}")
    async with engine.begin() as conn:
        await conn.run_sync(Base.metadata.create_all)
    yield async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)
    await engine.dispose()


@pytest_asyncio.fixture
async def db(session_factory):
    async with session_factory() as session:
        yield session


@pytest.fixture
def store(db) -> UserStore:
    return UserStore(db)


@pytest.fixture
def issuer() -> TokenIssuer:
    return TokenIssuer(TEST_SECRET, access_ttl=3600, refresh_ttl=604800)


@pytest.fixture
def google_verifier() -> FakeGoogleVerifier:
    return FakeGoogleVerifier()


@pytest.fixture
def service(store, issuer, google_verifier) -> AuthService:
    return AuthService(store, issuer, google_verifier, bcrypt_rounds=BCRYPT_TEST_ROUNDS)


@pytest.fixture
def app(session_factory, issuer, google_verifier):
    from main import create_app

    application = create_app()

    async def _service():
        async with session_factory() as session:
            yield AuthService(
                UserStore(session),
                issuer,
                google_verifier,
                bcrypt_rounds=BCRYPT_TEST_ROUNDS,
            )

    application.dependency_overrides[get_auth_service] = _service
    application.dependency_overrides[get_token_issuer] = lambda: issuer
    return application


@pytest_asyncio.fixture
async def api(app):
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://test/api") as client:
        yield client
