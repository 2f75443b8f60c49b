import smtplib

import pytest
from conftest import create_hackathon
from sqlalchemy.exc import OperationalError, ProgrammingError

from hackmap import config
from hackmap.routes import auth_routes, stats_routes


def test_health(client):
    assert client.get("/health").json() == {"status": "ok"}


def test_health_db(client, database, monkeypatch):
    r = client.get("/api/health/db")
    assert r.status_code == 200
    assert r.json()["status"] == "healthy"
    assert r.json()["database"] == "connected"

    monkeypatch.setattr(database, "check_connection", lambda: False)
    r = client.get("/api/health/db")
    assert r.status_code == 503
    assert r.json()["database"] == "disconnected"


def test_diag_config_hides_secrets(client, monkeypatch):
    monkeypatch.setattr(config, "SMTP_PASS", "hunter2")
    data = client.get("/api/diag/config").json()
    assert data["has_smtp_password"] is True
    assert "hunter2" not in str(data)


def test_redact_url():
    assert config._redact_url("postgresql://app:pw@db:5432/hackmap") == "postgresql://app:***@db:5432/hackmap"
    assert config._redact_url("sqlite:///./hackmap.db") == "sqlite:///./hackmap.db"


def test_validate_config_smtp_requires_user(monkeypatch):
    monkeypatch.setattr(config, "MAIL_PROVIDER", "smtp")
    monkeypatch.setattr(config, "SMTP_USER", "")
    with pytest.raises(RuntimeError, match="SMTP_USER"):
        config.validate_config()


def test_metrics_exposed(client):
    r = client.get("/metrics/")
    assert r.status_code == 200
    assert "matchmaking_requests_total" in r.text


class TestStats:
    def test_counts(self, client, make_user):
        create_hackathon(make_user("Org"))
        stats = {s["label"]: s["value"] for s in client.get("/api/stats").json()}
        assert stats == {
            "Active Hackathons": "1+",
            "Registered Users": "0+",
            "Teams Formed": "0+",
            "Projects Created": "0+",
        }

    def test_fallback_on_database_error(self, client, monkeypatch):
        def broken(session):
            raise ProgrammingError("SELECT", {}, Exception("no such table"))

        monkeypatch.setattr(stats_routes, "_collect_stats", broken)
        r = client.get("/api/stats")
        assert r.status_code == 200
        assert r.json() == stats_routes.FALLBACK_STATS


def test_database_outage_is_503(client, monkeypatch):
    def unreachable(session, email):
        raise OperationalError("SELECT", {}, Exception("could not connect"))

    monkeypatch.setattr(auth_routes, "get_user_by_email", unreachable)
    r = client.post("/api/auth/register", json={"name": "Ada", "email": "ada@example.com", "password": "password123"})
    assert r.status_code == 503
    assert r.json()["error"] == "database_unavailable"


class TestMailHealth:
    def test_console_is_healthy(self, client):
        r = client.get("/api/health/mail")
        assert r.status_code == 200
        assert r.json()["status"] == "healthy"
        assert r.json()["provider"] == "console"

    def test_unreachable_smtp_is_503(self, client, mailer, monkeypatch):
        def refused(*args, **kwargs):
            raise ConnectionRefusedError("connection refused")

        monkeypatch.setattr(mailer, "provider", "smtp")
        monkeypatch.setattr(smtplib, "SMTP", refused)
        r = client.get("/api/health/mail")
        assert r.status_code == 503
        assert r.json() == {"status": "unhealthy", "timestamp": r.json()["timestamp"], "provider": "smtp"}
