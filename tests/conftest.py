"""Test configuration and fixtures.

Provides an isolated file-based SQLite database so tests don't depend on a
developer's local database, plus a recording mailer so no SMTP relay is
contacted. Tables are recreated for every test.
"""

import os
import re
from typing import Generator

# Set env flags BEFORE importing application modules
os.environ.setdefault("DEBUG", "1")
os.environ.setdefault("TESTING", "1")
os.environ.setdefault("TEST_DATABASE_URL", "sqlite:///./test_db.sqlite")
os.environ.setdefault("ADMIN_API_KEY", "test-admin-key")
os.environ.setdefault("ENVIRONMENT", "development")

import pytest
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

import database  # original module with Base & SessionLocal placeholder
from database import Base, get_db
from main import app  # imports routers & models
from mailer import Mailer, get_mailer
from errors import DeliveryError
from services.otp import EphemeralOTPStore

TEST_DATABASE_URL = os.environ["TEST_DATABASE_URL"]
ADMIN_HEADERS = {"X-Admin-Key": os.environ["ADMIN_API_KEY"]}

engine = create_engine(
    TEST_DATABASE_URL, connect_args={"check_same_thread": False}
)
TestingSessionLocal = sessionmaker(autocommit=False, autoflush=False, bind=engine)


class RecordingMailer(Mailer):
    """Collects outgoing emails instead of talking to SMTP; can be told to fail."""

    def __init__(self):
        super().__init__(timeout=1)
        self.sent = []
        self.fail_with: Exception | None = None

    async def send(self, email):
        if self.fail_with is not None:
            raise self.fail_with
        self.sent.append(email)

    def last_code(self) -> str:
        assert self.sent, "no email was sent"
        match = re.search(r"\b(\d{6})\b", self.sent[-1].text)
        assert match, "no OTP code in last email"
        return match.group(1)

    def fail(self, message: str = "relay unavailable"):
        self.fail_with = DeliveryError(detail=message)


class RecordingBroadcaster:
    def __init__(self):
        self.events = []

    async def broadcast(self, event: str, message: dict) -> int:
        self.events.append((event, message))
        return 1


@pytest.fixture(autouse=True)
def create_test_db() -> Generator[None, None, None]:
    Base.metadata.create_all(bind=engine)
    yield
    Base.metadata.drop_all(bind=engine)


@pytest.fixture()
def db_session() -> Generator:  # type: ignore
    session = TestingSessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture()
def mailer() -> RecordingMailer:
    return RecordingMailer()


@pytest.fixture()
def broadcaster() -> RecordingBroadcaster:
    return RecordingBroadcaster()


@pytest.fixture(autouse=True)
def override_dependencies(db_session, mailer):  # type: ignore
    """Override FastAPI dependencies to use the SQLite session and the recording mailer."""
    def _get_db():
        try:
            yield db_session
        finally:
            pass
    app.dependency_overrides[get_db] = _get_db
    app.dependency_overrides[get_mailer] = lambda: mailer
    app.state.otp_store = EphemeralOTPStore()

    # Also redirect direct imports of SessionLocal within tests/modules
    database.SessionLocal = TestingSessionLocal  # type: ignore
    yield
    app.dependency_overrides.pop(get_db, None)
    app.dependency_overrides.pop(get_mailer, None)


@pytest.fixture()
def client() -> TestClient:  # type: ignore
    return TestClient(app)


@pytest.fixture()
def admin_headers() -> dict:
    return dict(ADMIN_HEADERS)
