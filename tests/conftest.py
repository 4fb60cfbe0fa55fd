"""Pytest fixtures for async FastAPI testing.

Loads `.env.test` when present (falling back to SQLite defaults), initializes
a clean test database, and provides an `AsyncClient` for integration tests.
Outgoing email helpers are stubbed and the Redis cache is disabled so tests
need neither an SMTP server nor Redis.
"""
import os
import pathlib
import uuid
from datetime import datetime, timedelta

import pytest
from dotenv import load_dotenv

ROOT = pathlib.Path(__file__).resolve().parent.parent

# Settings are read at import time, so the environment must be ready before
# any medibot module is imported by the test modules.
if (ROOT / ".env.test").exists():
    load_dotenv(dotenv_path=str(ROOT / ".env.test"))
os.environ.setdefault("DATABASE_URL", "sqlite:///./test_medibot.db")
os.environ.setdefault("SECRET_KEY", "test-secret-key-not-for-production")
os.environ.setdefault("CACHE_ENABLED", "false")
os.environ.setdefault("EMAIL_BACKEND", "console")
os.environ.setdefault("RATE_LIMIT_ENABLED", "false")
os.environ.setdefault("UNKNOWN_ROLE_POLICY", "reject")

PASSWORD = "Passw0rd!"


@pytest.fixture
def anyio_backend():
    return "asyncio"


@pytest.fixture(scope="session")
def prepare_database():
    """Create clean schema for the test session."""
    from medibot.core.database import engine, Base

    Base.metadata.drop_all(bind=engine)
    Base.metadata.create_all(bind=engine)

    yield

    Base.metadata.drop_all(bind=engine)


@pytest.fixture
def db_session(prepare_database):
    """Yield a SQLAlchemy session for direct DB access in tests."""
    from medibot.core.database import SessionLocal

    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


@pytest.fixture(scope="session")
def patch_email_helpers():
    """Patch email sending helpers so tests don't attempt SMTP connections."""
    import medibot.services.email_service as email_service

    original_send_password = email_service.send_password_reset_email
    original_send_email = email_service.send_email

    email_service.send_password_reset_email = lambda *a, **k: True
    email_service.send_email = lambda *a, **k: True

    yield

    email_service.send_password_reset_email = original_send_password
    email_service.send_email = original_send_email


@pytest.fixture
async def async_client(patch_email_helpers, prepare_database):
    """Provide an httpx AsyncClient configured with the FastAPI app."""
    from httpx import AsyncClient, ASGITransport
    from medibot.main import create_app

    app = create_app()

    async with AsyncClient(transport=ASGITransport(app=app), base_url="http://testserver") as client:
        yield client


def unique_email(prefix: str = "user") -> str:
    return f"{prefix}-{uuid.uuid4().hex[:8]}@example.com"


def make_user_with_session(db_session, role: str = "patient", name: str | None = None, pharmacy_id: int | None = None):
    """Create a user (with profile) plus a live session; return (token, user)."""
    from medibot.services.auth_service import AuthService

    user = AuthService.sign_up(
        db_session,
        email=unique_email(role.replace("_", "-")),
        password=PASSWORD,
        role=role,
        name=name,
        pharmacy_id=pharmacy_id,
    )
    return issue_token(db_session, user), user


def issue_token(db_session, user) -> str:
    from medibot.core.security import create_access_token, create_refresh_token, hash_token
    from medibot.models.session import UserSession

    access_token, access_jti = create_access_token(user_id=user.id, email=user.email, role=user.role)
    refresh_token, refresh_jti = create_refresh_token(user.id)
    session = UserSession(
        user_id=user.id,
        token_jti=access_jti,
        refresh_jti=refresh_jti,
        refresh_token_hash=hash_token(refresh_token),
        expires_at=datetime.utcnow() + timedelta(minutes=30),
        refresh_expires_at=datetime.utcnow() + timedelta(days=7),
    )
    db_session.add(session)
    db_session.commit()
    return access_token


def make_pharmacy(db_session, name: str = "City Pharmacy", status: str = "approved", lat=-1.95, lng=30.06, medicines=()):
    """Create a pharmacy with ``medicines`` given as (name, price, stock) tuples."""
    from medibot.models.medicine import Medicine
    from medibot.models.pharmacy import Pharmacy

    pharmacy = Pharmacy(name=name, location="Kigali", phone="+250700000000", latitude=lat, longitude=lng, status=status)
    db_session.add(pharmacy)
    db_session.flush()
    for med_name, price, stock in medicines:
        db_session.add(Medicine(pharmacy_id=pharmacy.id, name=med_name, price=price, stock=stock))
    db_session.commit()
    db_session.refresh(pharmacy)
    return pharmacy


def auth(token: str) -> dict:
    return {"Authorization": f"Bearer {token}"}
