def test_health(client):
    response = client.get("/health")
    assert response.status_code == 200
    assert response.text == "OK"
    assert response.headers["content-type"].startswith("text/plain")


def test_request_id_is_echoed_or_generated(client):
    echoed = client.get("/api/v1/entities", headers={"X-Request-ID": "req-123"})
    assert echoed.headers["X-Request-ID"] == "req-123"

    generated = client.get("/api/v1/entities")
    assert generated.headers["X-Request-ID"]


def test_metrics_count_requests_by_route_template(client):
    created = client.post("/api/v1/entities", json={"name": "Sensor"}).json()["data"]
    client.get(f"/api/v1/entities/{created['id']}")
    client.get("/api/v1/entities/999999")
    client.get("/health")

    body = client.get("/metrics").text

    assert 'http_requests_total{route="/api/v1/entities",method="POST",status="201"} 1' in body
    assert 'http_requests_total{route="/api/v1/entities/{entity_id}",method="GET",status="200"} 1' in body
    assert 'http_requests_total{route="/api/v1/entities/{entity_id}",method="GET",status="404"} 1' in body
    assert 'route="/health"' not in body
    assert "http_request_errors_5xx_total 0" in body


def test_unknown_paths_share_one_metrics_label(client):
    for n in range(5):
        assert client.get(f"/nope/{n}").status_code == 404

    body = client.get("/metrics").text

    assert 'http_requests_total{route="<unmatched>",method="GET",status="404"} 5' in body
    assert "/nope/" not in body
