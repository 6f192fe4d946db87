"""Tests for the rate-limit admin endpoints."""

from __future__ import annotations

from fastapi.testclient import TestClient

ADMIN = {"X-API-Key": "admin-key-123"}


def _exhaust(client: TestClient, valid_payload, csrf_headers, ip: str) -> None:
    for _ in range(5):
        client.post("/contact", json=valid_payload, headers=csrf_headers(ip=ip))


def test_stats_requires_api_key(client: TestClient) -> None:
    response = client.get("/admin/rate-limit/stats")

    assert response.status_code == 403
    assert response.json()["code"] == "invalid_api_key"


def test_stats_rejects_unknown_key(client: TestClient) -> None:
    response = client.get("/admin/rate-limit/stats", headers={"X-API-Key": "nope"})

    assert response.status_code == 403


def test_stats_reports_tracked_keys(client: TestClient, valid_payload, csrf_headers) -> None:
    client.post("/contact", json=valid_payload, headers=csrf_headers(ip="1.1.1.1"))
    client.post("/contact", json=valid_payload, headers=csrf_headers(ip="2.2.2.2"))

    response = client.get("/admin/rate-limit/stats", headers={"X-API-Key": "admin-key-456"})

    assert response.status_code == 200
    body = response.json()
    assert body["tracked_keys"] == 2
    assert body["config"]["max_requests"] == 5
    assert body["config"]["window_seconds"] == 3600


def test_reset_unblocks_client(client: TestClient, valid_payload, csrf_headers) -> None:
    _exhaust(client, valid_payload, csrf_headers, "1.2.3.4")
    assert client.post("/contact", json=valid_payload, headers=csrf_headers(ip="1.2.3.4")).status_code == 429

    response = client.delete("/admin/rate-limit/1.2.3.4", headers=ADMIN)

    assert response.status_code == 200
    assert response.json() == {"client_ip": "1.2.3.4", "cleared": True}
    retry = client.post("/contact", json=valid_payload, headers=csrf_headers(ip="1.2.3.4"))
    assert retry.status_code == 200
    assert retry.headers["X-RateLimit-Remaining"] == "4"


def test_reset_unknown_client(client: TestClient) -> None:
    response = client.delete("/admin/rate-limit/9.9.9.9", headers=ADMIN)

    assert response.status_code == 200
    assert response.json()["cleared"] is False


def test_reset_requires_api_key(client: TestClient) -> None:
    response = client.delete("/admin/rate-limit/1.2.3.4")

    assert response.status_code == 403
