"""
Shared fixtures: an app on a fresh in-memory store with a deterministic
clock, a fake report generator, and helpers for accounts and tokens.
"""

from datetime import datetime, timedelta
from typing import Any, Dict

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from app.config import Settings
from app.main import create_app
from healthmonitor.ai import LLMResponse
from healthmonitor.database import MemoryStore

TEST_SECRET = "test-session-secret"
ADMIN_EMAIL = "admin@healthmonitor.com"
ADMIN_PASSWORD = "Admin@123"
PATIENT_PASSWORD = "Patient@123"


class TickingClock:
    """Returns a strictly increasing time on every call."""

    def __init__(self, start: datetime = datetime(2026, 5, 15, 12, 0, 0),
                 step: timedelta = timedelta(seconds=1)):
        self.current = start
        self.step = step

    def __call__(self) -> datetime:
        now = self.current
        self.current += self.step
        return now


class FixedClock:
    """Returns `current` unchanged until a test moves it."""

    def __init__(self, current: datetime = datetime(2026, 5, 15, 12, 0, 0)):
        self.current = current

    def __call__(self) -> datetime:
        return self.current


class FakeReportGenerator:
    """Stands in for the Groq client; records the prompts it receives."""

    def __init__(self, configured: bool = True, content: str = "## HEALTH REPORT ANALYSIS\nAll vitals normal."):
        self.configured = configured
        self.content = content
        self.error = None
        self.prompts = []

    @property
    def is_configured(self) -> bool:
        return self.configured

    def generate(self, prompt: str, system_prompt: str = "") -> LLMResponse:
        self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return LLMResponse(content=self.content, model="fake-model")


def auth_header(token: str) -> Dict[str, str]:
    return {"Authorization": f"Bearer {token}"}


def registration_payload(email: str, **overrides: Any) -> Dict[str, Any]:
    payload = {
        "email": email,
        "phone": "5551234567",
        "password": PATIENT_PASSWORD,
        "bloodGroup": "O+",
        "gender": "Female",
    }
    payload.update(overrides)
    return payload


def register(client: TestClient, email: str, **overrides: Any) -> Dict[str, Any]:
    response = client.post("/api/auth/register", json=registration_payload(email, **overrides))
    assert response.status_code == 201, response.text
    return response.json()


def login(client: TestClient, email: str, password: str = PATIENT_PASSWORD, role: str = "patient") -> str:
    response = client.post("/api/auth/login", json={"email": email, "password": password, "role": role})
    assert response.status_code == 200, response.text
    return response.json()["token"]


@pytest.fixture
def settings():
    return Settings(
        _env_file=None,
        ENVIRONMENT="test",
        SESSION_SECRET=TEST_SECRET,
        LOG_LEVEL="WARNING",
        STORAGE_BACKEND="memory",
        ADMIN_EMAIL=ADMIN_EMAIL,
        ADMIN_PASSWORD=ADMIN_PASSWORD,
    )


@pytest.fixture
def clock():
    return TickingClock()


@pytest.fixture
def store(clock):
    return MemoryStore(clock=clock)


@pytest.fixture
def report_generator():
    return FakeReportGenerator()


@pytest.fixture
def app(settings, store, report_generator):
    application = create_app(settings)
    application.state.store = store
    application.state.report_generator = report_generator
    return application


@pytest.fixture
def client(app):
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def admin_token(client):
    return login(client, ADMIN_EMAIL, ADMIN_PASSWORD, role="admin")


@pytest.fixture
def patient(client):
    """A registered patient: `{"user": <user json>, "token": <bearer token>}`."""
    user = register(client, "alice@example.com")
    return {"user": user, "token": login(client, "alice@example.com")}


@pytest.fixture
def other_patient(client):
    user = register(client, "bob@example.com", gender="Male", bloodGroup="A-")
    return {"user": user, "token": login(client, "bob@example.com")}


@pytest.fixture
def jwt_claims():
    """Decode a token's identity claims without verifying it."""
    def _claims(token: str) -> Dict[str, Any]:
        claims = jwt.get_unverified_claims(token)
        return {"userId": claims["userId"], "role": claims["role"]}
    return _claims
