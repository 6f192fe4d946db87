from __future__ import annotations

from fastapi import APIRouter, Depends

from app.adapters.rate_limit.base import AbstractRateLimiter
from app.core.auth import verify_admin_api_key
from app.core.rate_limit import build_rate_limit_key, get_rate_limiter
from app.schemas.admin import RateLimitResetResponse, RateLimitStatsResponse

router = APIRouter(
    prefix="/admin",
    tags=["Admin"],
    dependencies=[Depends(verify_admin_api_key)],
)


@router.get("/rate-limit/stats", response_model=RateLimitStatsResponse)
def rate_limit_stats(
    limiter: AbstractRateLimiter = Depends(get_rate_limiter),
) -> RateLimitStatsResponse:
    """Number of tracked client keys and the active limiter configuration."""

    return RateLimitStatsResponse.model_validate(limiter.stats())


@router.delete("/rate-limit/{client_ip}", response_model=RateLimitResetResponse)
def reset_rate_limit(
    client_ip: str,
    limiter: AbstractRateLimiter = Depends(get_rate_limiter),
) -> RateLimitResetResponse:
    """Unblock a legitimate visitor by forgetting their recorded attempts."""

    cleared = limiter.reset(build_rate_limit_key(client_ip))
    return RateLimitResetResponse(client_ip=client_ip, cleared=cleared)
