"""Application configuration using Pydantic Settings.

Configuration is environment-aware:
- APP_ENV determines which .env file to load
- Supports: development, testing, staging, production
- Each environment has its own .env.{environment} file
"""

from __future__ import annotations

import os
from pathlib import Path

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


# Determine which environment to load (default: development)
APP_ENV = os.getenv("APP_ENV", "development")

# Project root (so .env resolution doesn't depend on current working directory)
PROJECT_ROOT = Path(__file__).resolve().parents[2]

# Map environments to their respective .env files (relative to PROJECT_ROOT)
ENV_FILE_MAP = {
    "development": ".env.development",
    "testing": ".env.testing",
    "staging": ".env.staging",
    "production": ".env.production",
}

# Select the .env file for the current environment
_env_filename = ENV_FILE_MAP.get(APP_ENV, ".env.development")
_env_path = PROJECT_ROOT / _env_filename

# Only load from file if it exists (production might inject via env vars only)
_env_file = str(_env_path) if _env_path.is_file() else None


# Load .env file early to populate os.environ before creating nested settings
# This is necessary because Pydantic nested BaseSettings don't inherit env_file
if _env_file:
    from dotenv import load_dotenv
    load_dotenv(_env_file, override=True)


# Value shipped in .env.example for the optional autoresponse template
AUTORESPONSE_PLACEHOLDER = "your_autoresponse_template_id_here"


class AppSettings(BaseSettings):
    """Application-wide configuration."""

    debug: bool = Field(
        False,
        description="Surface diagnostic error detail in responses (never in production)",
    )
    admin_api_keys: str | None = Field(
        None,
        description="Comma-separated API keys allowed to call the /admin endpoints",
    )

    model_config = SettingsConfigDict(
        env_prefix="APP_",
        case_sensitive=False,
    )


class RateLimitSettings(BaseSettings):
    """Sliding-window limits applied to contact submissions, per client IP."""

    enabled: bool = Field(
        True,
        description="Enable per-IP rate limiting on the contact endpoint",
    )
    window_seconds: float = Field(
        3600,
        description="Sliding window duration in seconds",
        gt=0,
    )
    max_requests: int = Field(
        5,
        description="Maximum admitted submissions per window",
        ge=1,
    )
    sweep_interval_seconds: float = Field(
        600,
        description="Interval between background sweeps of expired entries",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="RATE_LIMIT_",
        case_sensitive=False,
    )


class CsrfSettings(BaseSettings):
    """Double-submit cookie settings."""

    cookie_name: str = Field("csrf-token", description="Cookie carrying the token")
    header_name: str = Field("X-CSRF-Token", description="Header echoing the token")
    cookie_secure: bool | None = Field(
        None,
        description="Force the Secure cookie flag; defaults to APP_ENV == production",
    )

    model_config = SettingsConfigDict(
        env_prefix="CSRF_",
        case_sensitive=False,
    )


class MailSettings(BaseSettings):
    """EmailJS credentials and endpoint. Never sent to the browser."""

    service_id: str | None = Field(None, description="EmailJS service identifier")
    template_id: str | None = Field(None, description="Template for the notification")
    public_key: str | None = Field(None, description="EmailJS public key (user_id)")
    private_key: str | None = Field(None, description="EmailJS private key (accessToken)")
    autoresponse_template_id: str | None = Field(
        None,
        description="Optional template for the confirmation sent to the submitter",
    )
    api_url: str = Field(
        "https://api.emailjs.com/api/v1.0/email/send",
        description="EmailJS REST send endpoint",
    )
    timeout_seconds: float = Field(
        10.0,
        description="Timeout applied to each EmailJS call",
        gt=0,
    )

    model_config = SettingsConfigDict(
        env_prefix="EMAILJS_",
        case_sensitive=False,
    )

    @property
    def is_configured(self) -> bool:
        return bool(self.service_id and self.template_id and self.public_key)

    @property
    def autoresponse_enabled(self) -> bool:
        return bool(
            self.autoresponse_template_id
            and self.autoresponse_template_id != AUTORESPONSE_PLACEHOLDER
        )


class LogSettings(BaseSettings):
    """Logging output configuration."""

    level: str = Field("INFO", description="Root log level")
    format: str = Field("json", description="Log format: json or plain")
    output: str = Field("stdout", description="Log destination: stdout or file")
    file_path: str | None = Field(None, description="Log file path when output=file")
    max_bytes: int = Field(0, description="Rotate the log file past this size (0 disables)")
    backup_count: int = Field(5, description="Rotated files to keep")
    request_id_header: str = Field("X-Request-ID", description="Correlation header name")
    redact_personal_data: bool = Field(
        True, description="Redact submitter PII (name, email, phone, IP) from log fields"
    )

    model_config = SettingsConfigDict(
        env_prefix="LOG_",
        case_sensitive=False,
    )


class Settings(BaseSettings):
    """Main application settings container.

    Automatically loads from the appropriate .env.{APP_ENV} file.
    Raises validation errors on startup if values are malformed.

    Environments:
    - development: Local development
    - testing: Automated tests (uses .env.testing)
    - staging: Pre-production (uses .env.staging)
    - production: Production deployment (Secure cookies, no debug detail)
    """

    app_env: str = APP_ENV
    app: AppSettings = Field(default_factory=AppSettings)
    rate_limit: RateLimitSettings = Field(default_factory=RateLimitSettings)
    csrf: CsrfSettings = Field(default_factory=CsrfSettings)
    mail: MailSettings = Field(default_factory=MailSettings)
    log: LogSettings = Field(default_factory=LogSettings)

    model_config = SettingsConfigDict(
        case_sensitive=False,
    )

    @property
    def is_production(self) -> bool:
        return self.app_env.lower() == "production"

    @property
    def csrf_cookie_secure(self) -> bool:
        if self.csrf.cookie_secure is not None:
            return self.csrf.cookie_secure
        return self.is_production


# Global settings instance - composed from domain-specific settings
# Nested settings are created via default_factory so env loading works.
settings = Settings()
