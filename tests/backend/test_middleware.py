def test_request_id_is_generated(test_app_client):
    client, _ = test_app_client

    resp = client.get("/health")

    assert resp.headers["x-request-id"]


def test_request_id_is_echoed_when_sane(test_app_client):
    client, _ = test_app_client

    resp = client.get("/health", headers={"X-Request-ID": "trace-123"})

    assert resp.headers["x-request-id"] == "trace-123"


def test_malformed_request_id_is_replaced(test_app_client):
    client, _ = test_app_client

    resp = client.get("/health", headers={"X-Request-ID": "bad id; drop table"})

    assert resp.headers["x-request-id"] != "bad id; drop table"


def test_oversized_body_is_rejected(authorized_client):
    client, _, _ = authorized_client

    resp = client.post(
        "/api/profile",
        json={"status": "Developer", "skills": "Go", "bio": "x" * (600 * 1024)},
        headers={"Authorization": "Bearer fake"},
    )

    assert resp.status_code == 413
    assert resp.json() == {"msg": "Request too large"}
