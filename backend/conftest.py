import os
import sys

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.pool import StaticPool

sys.path.insert(0, os.path.dirname(os.path.abspath(__file__)))

import database
from services.grading_service import GradingService
from services.verification_service import MemoryVerificationStore, VerificationService

PASSWORD = "Secret123"

SAMPLE_PROBLEM = {
    "title": "Design a URL Shortener",
    "difficulty": "Medium",
    "category": "Web",
    "description": "Build a service that turns long URLs into short aliases.",
    "functional_requirements": ["Shorten a URL", "Redirect to the original URL"],
    "non_functional_requirements": ["Low latency redirects", "High availability"],
    "hints": [{"id": "h1", "title": "Encoding", "content": "Think about base62."}],
    "reference_solution": "Use a key-value store keyed by a base62 id with a cache in front.",
}


class FakeClock:
    def __init__(self, now: float = 1_700_000_000.0):
        self.now = now

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float):
        self.now += seconds


class FakeSender:
    def __init__(self):
        self.sent = []

    def send(self, to, subject, html):
        self.sent.append({"to": to, "subject": subject, "html": html})


class FakeProvider:
    name = "fake"

    def __init__(self, text='{"matchPercentage": 50, "feedback": "ok"}', status="success"):
        self.text = text
        self.status = status
        self.calls = []

    async def chat(self, messages, model=None):
        self.calls.append(messages)
        return {
            "text": self.text,
            "provider": self.name,
            "model": model or "fake-model",
            "status": self.status,
            "error": None if self.status == "success" else "boom",
        }


@pytest.fixture
def db_engine():
    engine = database.init_engine("sqlite://", poolclass=StaticPool)
    database.init_db()
    yield engine
    database.dispose_engine()


@pytest.fixture
def db(db_engine):
    session = database.SessionLocal()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def sender():
    return FakeSender()


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def client(db_engine, clock, sender, provider):
    from main import app

    app.state.verification_service = VerificationService(MemoryVerificationStore(), sender, clock=clock)
    app.state.grading_service = GradingService(provider)
    # No context manager: the lifespan (real engine, real SMTP/LLM) stays off.
    return TestClient(app)


def register(client, email, name="Tester", password=PASSWORD) -> dict:
    resp = client.post("/api/auth/signup", json={"name": name, "email": email, "password": password})
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]


def auth_headers(client, email, password=PASSWORD) -> dict:
    resp = client.post("/api/auth/login", json={"email": email, "password": password})
    assert resp.status_code == 200, resp.text
    client.cookies.clear()
    return {"Authorization": f"Bearer {resp.json()['data']['token']}"}


@pytest.fixture
def admin_headers(client):
    register(client, "admin@example.com", name="Admin")
    return auth_headers(client, "admin@example.com")


@pytest.fixture
def user_headers(client, admin_headers):
    register(client, "user@example.com", name="User")
    return auth_headers(client, "user@example.com")


def create_problem(client, headers, **overrides) -> dict:
    resp = client.post("/api/problems", json={**SAMPLE_PROBLEM, **overrides}, headers=headers)
    assert resp.status_code == 201, resp.text
    return resp.json()["data"]
