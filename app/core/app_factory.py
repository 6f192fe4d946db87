"""Application factory for FastAPI app.

Centralizes app construction (metadata, middleware, handlers, routers and
the stateful collaborators) so each test can build an isolated instance with
its own limiter store.
"""

from __future__ import annotations

from contextlib import asynccontextmanager

from fastapi import FastAPI

from app.adapters.mail.factory import create_mail_client
from app.api.routes import admin_router, contact_router, health_router
from app.core.config import settings
from app.core.csrf import csrf_cookie_middleware
from app.core.exception_handlers import setup_exception_handlers
from app.core.logging import configure_logging
from app.core.middleware import request_id_middleware, security_headers_middleware
from app.core.openapi import apply_openapi_customizations
from app.core.rate_limit import create_rate_limiter


@asynccontextmanager
async def lifespan(app: FastAPI):
    yield
    # Stop the limiter's background sweep and release mail connections
    app.state.rate_limiter.close()
    await app.state.mail_client.aclose()


def create_app() -> FastAPI:
    """Create and configure the FastAPI application instance.

    Returns:
        Configured FastAPI app with middleware, handlers, routers and docs.
    """
    # Logging first so subsequent init logs are formatted as desired
    configure_logging(settings.log)

    app = FastAPI(
        title="Contact API",
        description=(
            "Backend of the firm's marketing site: a single contact form "
            "endpoint protected by a per-IP sliding-window rate limit and a "
            "double-submit CSRF cookie, delivering submissions by email "
            "through EmailJS."
        ),
        version="0.1.0",
        license_info={
            "name": "MIT License",
            "url": "https://opensource.org/licenses/MIT",
        },
        lifespan=lifespan,
    )

    # Stateful collaborators, owned by this app instance
    app.state.rate_limiter = create_rate_limiter(settings.rate_limit)
    app.state.mail_client = create_mail_client(settings.mail)

    # Middleware (last registered runs first)
    app.middleware("http")(security_headers_middleware)
    app.middleware("http")(csrf_cookie_middleware)
    app.middleware("http")(request_id_middleware)

    # Exception handlers
    setup_exception_handlers(app)

    # Routers
    app.include_router(contact_router)
    app.include_router(admin_router)
    app.include_router(health_router)

    # OpenAPI customizations (security schemes, tags)
    apply_openapi_customizations(app)

    return app
