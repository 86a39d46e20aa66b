def test_health_endpoint_returns_ok(client):
    response = client.get("/health")

    assert response.status_code == 200
    body = response.json()
    assert body["status"] == "ok"
    assert "service" in body
    assert "version" in body
    assert "environment" in body


def test_root_banner(client):
    response = client.get("/")

    assert response.status_code == 200
    assert response.text == "Checkout API is live."
