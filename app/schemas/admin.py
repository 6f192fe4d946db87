"""Pydantic schemas for the admin rate-limit endpoints."""

from __future__ import annotations

from pydantic import BaseModel, Field


class RateLimitConfig(BaseModel):
    window_seconds: float
    max_requests: int
    sweep_interval_seconds: float | None = None


class RateLimitStatsResponse(BaseModel):
    """Snapshot of the limiter store. Internal observability only."""

    tracked_keys: int = Field(..., description="Number of client keys currently tracked.")
    config: RateLimitConfig


class RateLimitResetResponse(BaseModel):
    client_ip: str
    cleared: bool = Field(..., description="False when the client had no recorded attempts.")
