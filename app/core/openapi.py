"""OpenAPI metadata and customization utilities.

Provides a helper to enrich the generated OpenAPI schema with:
- Tags metadata
- The CSRF header scheme required by the contact endpoint
- The admin API key scheme (``X-API-Key``), applied to /admin paths only

This keeps documentation concerns decoupled from the app factory.
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import FastAPI

from app.core.config import settings


def apply_openapi_customizations(app: FastAPI) -> None:
    """Patch FastAPI's OpenAPI generation to add metadata and security."""

    original_openapi = app.openapi

    def custom_openapi() -> Dict[str, Any]:
        schema = original_openapi()

        # Components / security schemes
        components = schema.setdefault("components", {})
        security_schemes = components.setdefault("securitySchemes", {})
        security_schemes.setdefault(
            "CsrfToken",
            {
                "type": "apiKey",
                "in": "header",
                "name": settings.csrf.header_name,
                "description": (
                    f"Echo the value of the '{settings.csrf.cookie_name}' cookie, "
                    "issued on the first page load."
                ),
            },
        )
        security_schemes.setdefault(
            "AdminApiKey",
            {
                "type": "apiKey",
                "in": "header",
                "name": "X-API-Key",
                "description": "Admin key listed in APP_ADMIN_API_KEYS.",
            },
        )

        # Tags metadata
        tags = schema.setdefault("tags", [])
        existing_tag_names = {t.get("name") for t in tags}
        desired_tags = [
            {
                "name": "Contact",
                "description": "Contact form submission.",
            },
            {
                "name": "Admin",
                "description": "Rate limiter observability and manual unblocking.",
            },
            {
                "name": "Health",
                "description": "Liveness check.",
            },
        ]
        for tag in desired_tags:
            if tag["name"] not in existing_tag_names:
                tags.append(tag)

        # Per-path security requirements
        paths = schema.get("paths", {})
        for path, methods in paths.items():
            if path.endswith("/contact"):
                requirement = [{"CsrfToken": []}]
            elif path.startswith("/admin"):
                requirement = [{"AdminApiKey": []}]
            else:
                requirement = []
            for method_obj in methods.values():
                if isinstance(method_obj, dict):
                    method_obj["security"] = requirement

        return schema

    app.openapi = custom_openapi  # type: ignore[assignment]
