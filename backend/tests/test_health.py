def test_health_endpoints(client):
    live = client.get("/api/health/live")
    assert live.status_code == 200
    assert live.json()["status"] == "ok"

    ready = client.get("/api/health/ready")
    assert ready.status_code in {200, 503}
    payload = ready.json()
    assert "database" in payload
    assert set(payload["database"]) >= {"ok", "schema_ok", "missing_tables", "missing_columns"}


def test_ready_reports_missing_tables(client, monkeypatch):
    from examdesk.api.routes import health

    monkeypatch.setitem(health.REQUIRED_COLUMNS, "grading_sheets", {"id"})

    ready = client.get("/api/health/ready")

    assert ready.status_code == 503
    assert "grading_sheets" in ready.json()["database"]["missing_tables"]
