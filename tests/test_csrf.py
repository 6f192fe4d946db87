"""Tests for CSRF token issuance and double-submit validation."""

from __future__ import annotations

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.core.config import settings
from app.core.csrf import (
    generate_csrf_token,
    is_static_asset,
    validate_csrf_tokens,
)
from app.core.errors import CsrfAppError


class TestValidateCsrfTokens:
    """Pure double-submit comparison."""

    def test_matching_tokens_pass(self) -> None:
        validate_csrf_tokens("token-123", "token-123")

    @pytest.mark.parametrize(
        ("cookie_token", "header_token"),
        [
            (None, "token-123"),
            ("token-123", None),
            (None, None),
            ("", ""),
            ("abc", "xyz"),
            ("token-123", "token-1234"),
            ("token-123", "TOKEN-123"),
        ],
    )
    def test_missing_or_mismatched_tokens_fail(self, cookie_token, header_token) -> None:
        with pytest.raises(CsrfAppError) as exc_info:
            validate_csrf_tokens(cookie_token, header_token)

        assert exc_info.value.code == "csrf_invalid"

    def test_non_ascii_header_fails_closed(self) -> None:
        with pytest.raises(CsrfAppError):
            validate_csrf_tokens("token-123", "tokén-123")


class TestStaticAssetMatcher:
    @pytest.mark.parametrize(
        "path",
        [
            "/_next/static/chunks/main.js",
            "/_next/image",
            "/static/app.css",
            "/favicon.ico",
            "/images/office.jpg",
            "/logo.SVG",
            "/team/photo.webp",
        ],
    )
    def test_static_paths(self, path: str) -> None:
        assert is_static_asset(path) is True

    @pytest.mark.parametrize("path", ["/", "/contact", "/api/contact", "/services/paie"])
    def test_page_paths(self, path: str) -> None:
        assert is_static_asset(path) is False


def test_generated_tokens_are_unique() -> None:
    tokens = {generate_csrf_token() for _ in range(100)}
    assert len(tokens) == 100


class TestCsrfCookieIssuer:
    """Cookie issuance through the full middleware stack."""

    def test_issues_cookie_when_absent(self, client: TestClient) -> None:
        response = client.get("/health")

        set_cookie = response.headers.get("set-cookie")
        assert set_cookie is not None
        assert set_cookie.startswith(f"{settings.csrf.cookie_name}=")
        assert "Path=/" in set_cookie
        assert "samesite=strict" in set_cookie.lower()
        assert "httponly" not in set_cookie.lower()
        # APP_ENV=testing: not a production deployment
        assert "secure" not in set_cookie.lower()

    def test_does_not_rotate_existing_token(self, client: TestClient) -> None:
        response = client.get("/health", headers={"Cookie": "csrf-token=existing"})

        assert "set-cookie" not in response.headers

    def test_skips_static_assets(self, client: TestClient) -> None:
        response = client.get("/favicon.ico")

        assert "set-cookie" not in response.headers

    def test_secure_flag_in_production(self, client: TestClient, monkeypatch) -> None:
        monkeypatch.setattr(settings.csrf, "cookie_secure", True)

        response = client.get("/health")

        assert "secure" in response.headers["set-cookie"].lower()

    def test_cookie_issued_on_rejected_submission(self, client: TestClient) -> None:
        """A first POST without a cookie is refused but leaves the client a token."""
        response = client.post("/contact", json={}, headers={"X-CSRF-Token": "guess"})

        assert response.status_code == 403
        assert response.headers["set-cookie"].startswith("csrf-token=")


class TestVerifyCsrfDependency:
    def test_matching_pair_passes_regardless_of_payload(
        self, client: TestClient, csrf_headers
    ) -> None:
        response = client.post("/contact", json={"name": ""}, headers=csrf_headers())

        # Past the CSRF stage: rejected for the payload, not the token
        assert response.status_code == 400
        assert response.json()["code"] == "invalid_payload"

    def test_missing_header_is_forbidden(self, client: TestClient, valid_payload) -> None:
        response = client.post(
            "/contact",
            json=valid_payload,
            headers={"Cookie": "csrf-token=abc"},
        )

        assert response.status_code == 403
        assert response.json()["error"] == "Invalid CSRF token"

    def test_missing_cookie_is_forbidden(self, client: TestClient, valid_payload) -> None:
        response = client.post(
            "/contact",
            json=valid_payload,
            headers={"X-CSRF-Token": "abc"},
        )

        assert response.status_code == 403


def test_custom_header_name_is_honoured(app: FastAPI, monkeypatch, valid_payload) -> None:
    monkeypatch.setattr(settings.csrf, "header_name", "X-XSRF")
    client = TestClient(app)

    response = client.post(
        "/contact",
        json=valid_payload,
        headers={"Cookie": "csrf-token=abc", "X-XSRF": "abc"},
    )

    assert response.status_code == 200
