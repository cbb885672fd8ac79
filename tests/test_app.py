# tests/test_app.py
from contextlib import contextmanager

from sqlalchemy.exc import OperationalError

from hickory.config.settings import settings


def test_health(client):
    res = client.get("/health")
    assert res.status_code == 200
    assert res.get_json() == {"status": "ok", "service": "hickory-api", "environment": settings.environment}


def test_health_db_reports_dialect(client):
    res = client.get("/health/db")
    assert res.status_code == 200
    assert res.get_json() == {"db": "ok", "dialect": "sqlite"}


def test_health_db_unavailable_is_503(client, monkeypatch):
    @contextmanager
    def broken_session():
        raise OperationalError("select 1", {}, Exception("connection refused"))
        yield  # pragma: no cover

    monkeypatch.setattr("hickory.api.routes.health_routes.db_session", broken_session)

    res = client.get("/health/db")
    assert res.status_code == 503
    assert res.get_json() == {"db": "unavailable"}


def test_oversized_body_is_413(client):
    body = {"email": "someone@example.com", "password": "x" * (settings.max_request_bytes + 1)}
    res = client.post("/api/auth/login", json=body)
    assert res.status_code == 413
    assert res.get_json()["code"] == "request_entity_too_large"


def test_responses_keep_schema_field_order(client, make_user, auth_header):
    customer = make_user()
    res = client.post(
        "/api/tickets",
        json={"title": "VPN drops", "description": "Drops every ten minutes."},
        headers=auth_header(customer),
    )
    assert list(res.get_json())[:3] == ["id", "ticketNumber", "title"]
