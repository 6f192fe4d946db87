"""Pytest configuration and fixtures shared across all test modules.

This file is automatically loaded by pytest before running any tests.
It sets the environment before anything imports ``app.core.config`` so the
settings singleton is built from test values.
"""

import os

# CRITICAL: Set this before any imports that might load settings
os.environ["APP_ENV"] = "testing"

# Set default env vars that all tests might need
os.environ.setdefault("EMAILJS_SERVICE_ID", "service_test")
os.environ.setdefault("EMAILJS_TEMPLATE_ID", "template_test")
os.environ.setdefault("EMAILJS_PUBLIC_KEY", "public-key-test")
os.environ.setdefault("EMAILJS_PRIVATE_KEY", "private-key-test")
os.environ.setdefault("APP_ADMIN_API_KEYS", "admin-key-123,admin-key-456")
os.environ.setdefault("RATE_LIMIT_MAX_REQUESTS", "5")
os.environ.setdefault("RATE_LIMIT_WINDOW_SECONDS", "3600")

from typing import Any, Iterator, Mapping

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient

from app.adapters.mail.base import AbstractMailClient
from app.api.routes.contact import get_mail_client
from app.core.app_factory import create_app


class FakeMailClient(AbstractMailClient):
    """Records every send; optionally fails on a given call number."""

    def __init__(self, fail_on_call: int | None = None, error: Exception | None = None) -> None:
        self.calls: list[dict[str, Any]] = []
        self.closed = False
        self.fail_on_call = fail_on_call
        self.error = error or RuntimeError("EmailJS returned 400: The Public Key is invalid")

    async def send(
        self,
        service_id: str,
        template_id: str,
        template_params: Mapping[str, str],
        *,
        public_key: str,
        private_key: str | None = None,
    ) -> None:
        self.calls.append(
            {
                "service_id": service_id,
                "template_id": template_id,
                "template_params": dict(template_params),
                "public_key": public_key,
                "private_key": private_key,
            }
        )
        if self.fail_on_call is not None and len(self.calls) == self.fail_on_call:
            raise self.error

    async def aclose(self) -> None:
        self.closed = True


@pytest.fixture
def mail_client() -> FakeMailClient:
    return FakeMailClient()


@pytest.fixture
def app(mail_client: FakeMailClient) -> Iterator[FastAPI]:
    """Fresh application (and limiter store) per test."""
    application = create_app()
    application.dependency_overrides[get_mail_client] = lambda: mail_client
    yield application
    application.state.rate_limiter.close()


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app)


@pytest.fixture
def valid_payload() -> dict[str, Any]:
    return {
        "name": "Jeanne Martin",
        "email": "jeanne.martin@example.com",
        "phone": "0601020304",
        "requestType": "devis",
        "sector": "Restauration",
        "message": "Bonjour, je souhaite un devis pour la tenue de ma comptabilité.",
        "rgpd": True,
    }


def csrf_headers(token: str = "csrf-abc", header_token: str | None = None, ip: str = "1.2.3.4") -> dict[str, str]:
    """Headers for a request carrying the CSRF cookie and its echo."""
    return {
        "Cookie": f"csrf-token={token}",
        "X-CSRF-Token": token if header_token is None else header_token,
        "X-Forwarded-For": ip,
    }


@pytest.fixture(name="csrf_headers")
def csrf_headers_fixture():
    return csrf_headers
