import pytest
from bson import ObjectId
from fastapi.testclient import TestClient

from conftest import auth_headers, make_student
from placement_api.core.config import settings, validate_settings
from placement_api.main import create_app
from placement_api.models.user import Role


def build_client(store, monkeypatch, **overrides):
    for name, value in overrides.items():
        monkeypatch.setattr(settings, name, value)
    return TestClient(create_app(store=store))


def test_large_responses_are_gzipped(store, monkeypatch, insert_users):
    client = build_client(store, monkeypatch, GZIP_MINIMUM_SIZE=200)
    insert_users(*[make_student(f"Student{i}") for i in range(10)])

    response = client.get(
        "/api/v1/admin/students",
        headers={**auth_headers(ObjectId(), Role.ADMIN), "Accept-Encoding": "gzip"},
    )

    assert response.status_code == 200
    assert response.headers["content-encoding"] == "gzip"
    assert len(response.json()["data"]) == 10


def test_small_responses_are_not_gzipped(client):
    response = client.get("/live", headers={"Accept-Encoding": "gzip"})

    assert "content-encoding" not in response.headers


def test_security_headers_on_every_response(client):
    for path in ("/live", "/api/v1/admin/students", "/missing"):
        response = client.get(path)

        assert response.headers["X-Content-Type-Options"] == "nosniff"
        assert response.headers["X-Frame-Options"] == "SAMEORIGIN"
        assert response.headers["Referrer-Policy"] == "no-referrer"
        assert "default-src 'self'" in response.headers["Content-Security-Policy"]
        assert "Strict-Transport-Security" not in response.headers


def test_hsts_only_in_production(store, monkeypatch):
    client = build_client(store, monkeypatch, ENVIRONMENT="production")

    response = client.get("/live")

    assert response.headers["Strict-Transport-Security"].startswith("max-age=")


def test_api_requests_over_the_limit_get_429(store, monkeypatch):
    client = build_client(store, monkeypatch, RATE_LIMIT="2 per minute")

    statuses = [client.get("/api/v1/admin/counsellors").status_code for _ in range(2)]
    response = client.get("/api/v1/admin/counsellors")

    assert statuses == [401, 401]
    assert response.status_code == 429
    body = response.json()
    assert body["success"] is False
    assert body["code"] == "RATE_LIMITED"
    assert body["details"]["retry_after"] >= 1
    assert int(response.headers["Retry-After"]) >= 1


def test_health_routes_are_not_rate_limited(store, monkeypatch):
    client = build_client(store, monkeypatch, RATE_LIMIT="1 per minute")

    assert [client.get("/live").status_code for _ in range(5)] == [200] * 5
    assert client.get("/api/v1/admin/counsellors").status_code == 401
    assert client.get("/api/v1/admin/counsellors").status_code == 429
    assert client.get("/health").status_code == 200


def test_rate_limit_can_be_disabled(store, monkeypatch):
    client = build_client(store, monkeypatch, RATE_LIMIT="1 per minute", RATE_LIMIT_ENABLED=False)

    statuses = [client.get("/api/v1/admin/counsellors").status_code for _ in range(3)]

    assert statuses == [401, 401, 401]


def test_forwarded_client_is_used_behind_trusted_proxy(store, monkeypatch):
    client = build_client(
        store, monkeypatch, RATE_LIMIT="1 per minute", FORWARDED_ALLOW_IPS=["testclient"]
    )

    def get(forwarded_for):
        return client.get("/api/v1/admin/counsellors", headers={"X-Forwarded-For": forwarded_for})

    assert get("203.0.113.5").status_code == 401
    assert get("203.0.113.6").status_code == 401
    assert get("203.0.113.5").status_code == 429


def test_forwarded_header_from_untrusted_peer_is_ignored(store, monkeypatch):
    client = build_client(store, monkeypatch, RATE_LIMIT="1 per minute")

    def get(forwarded_for):
        return client.get("/api/v1/admin/counsellors", headers={"X-Forwarded-For": forwarded_for})

    assert get("203.0.113.5").status_code == 401
    assert get("203.0.113.6").status_code == 429


def test_invalid_rate_limit_fails_validation(monkeypatch):
    monkeypatch.setattr(settings, "RATE_LIMIT", "lots of requests")

    with pytest.raises(ValueError, match="RATE_LIMIT"):
        validate_settings()
