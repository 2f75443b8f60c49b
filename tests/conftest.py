"""
Shared fixtures.

Every test gets its own in-memory SQLite database and a console mailer whose
outbox records what would have been sent.
"""

from __future__ import annotations

import os
from datetime import timedelta
from typing import Any, Dict, List, Optional

os.environ.setdefault("APP_ENV", "test")
os.environ.setdefault("MAIL_PROVIDER", "console")

import pytest
from fastapi.testclient import TestClient

from hackmap.data_client.database import Database
from hackmap.email_client.mailer import Mailer
from hackmap.main import create_app
from hackmap.utils import utcnow

DEFAULT_PASSWORD = "password123"


@pytest.fixture
def database():
    db = Database("sqlite://", max_retries=2, retry_delay=0)
    db.create_all()
    yield db
    db.dispose()


@pytest.fixture
def mailer():
    return Mailer(provider="console", base_url="http://hackmap.test")


@pytest.fixture
def app(database, mailer):
    return create_app(database=database, mailer=mailer)


@pytest.fixture
def client(app):
    """Anonymous client; owns the application lifespan."""
    with TestClient(app) as c:
        yield c


@pytest.fixture
def make_user(app, client):
    """
    Factory: register + log in a user and return a client carrying its session
    cookie. The returned client has a `user` attribute with the /me payload.
    """
    created: List[TestClient] = []

    def _make(name: str = "Alice", email: Optional[str] = None, skills: Optional[List[str]] = None) -> TestClient:
        c = TestClient(app)
        email = email or f"{name.lower()}@example.com"
        r = c.post("/api/auth/register", json={"name": name, "email": email, "password": DEFAULT_PASSWORD})
        assert r.status_code == 201, r.text
        r = c.post("/api/auth/login", json={"email": email, "password": DEFAULT_PASSWORD})
        assert r.status_code == 200, r.text
        if skills is not None:
            r = c.put("/api/profile", json={"skills": skills})
            assert r.status_code == 200, r.text
        c.user = c.get("/api/auth/me").json()
        created.append(c)
        return c

    yield _make
    for c in created:
        c.close()


def hackathon_payload(
    title: str = "Test Hack",
    deadline_in_days: float = 5,
    start_in_days: float = 10,
    max_team_size: int = 4,
    **extra: Any,
) -> Dict[str, Any]:
    now = utcnow()
    start = now + timedelta(days=start_in_days)
    data = {
        "title": title,
        "description": "A test hackathon",
        "theme": "ai",
        "startDate": start.isoformat(),
        "endDate": (start + timedelta(days=2)).isoformat(),
        "registrationDeadline": (now + timedelta(days=deadline_in_days)).isoformat(),
        "maxTeamSize": max_team_size,
    }
    data.update(extra)
    return data


def create_hackathon(c: TestClient, **kwargs: Any) -> Dict[str, Any]:
    r = c.post("/api/hackathons", json=hackathon_payload(**kwargs))
    assert r.status_code == 201, r.text
    return r.json()


def register(c: TestClient, hackathon_id: str) -> None:
    r = c.post(f"/api/hackathons/{hackathon_id}/register")
    assert r.status_code == 201, r.text


def create_team(c: TestClient, hackathon_id: str, name: str = "Team") -> Dict[str, Any]:
    r = c.post("/api/teams", json={"name": name, "hackathonId": hackathon_id})
    assert r.status_code == 201, r.text
    return r.json()


def join(c: TestClient, invite_code: str):
    return c.post("/api/teams/join", json={"inviteCode": invite_code})
