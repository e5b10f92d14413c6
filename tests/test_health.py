def test_live(client):
    assert client.get("/live").json() == {"status": "alive"}


def test_health_reports_database(client):
    response = client.get("/health")

    assert response.status_code == 200
    assert response.json()["checks"]["database"] == "healthy"
    assert "X-Process-Time" in response.headers


def test_ready_is_503_when_store_is_down(client, store, monkeypatch):
    async def ping():
        return False

    monkeypatch.setattr(store, "ping", ping)

    response = client.get("/ready")

    assert response.status_code == 503
    assert response.json()["reason"] == "database_unavailable"
