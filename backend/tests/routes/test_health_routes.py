def test_live(client):
    res = client.get("/live")

    assert res.status_code == 200
    assert res.json() == {"ok": True}


def test_health_checks_database(client):
    res = client.get("/health")

    assert res.status_code == 200
    assert res.json()["checks"] == {"database": True}
    assert res.json()["database_pool"]["checked_out"] == 0


def test_prometheus_exposes_domain_metrics(client, alice_headers):
    client.post(
        "/api/v1/posts",
        json={"give_description": "A", "want_description": "B"},
        headers=alice_headers,
    )

    res = client.get("/metrics/prometheus")

    assert res.status_code == 200
    assert res.headers["content-type"].startswith("text/plain")
    assert "tradeswap_service_operation_duration_seconds" in res.text
