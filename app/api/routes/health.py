from __future__ import annotations

from fastapi import APIRouter

from app.core.config import settings

router = APIRouter(tags=["Health"])


@router.get("/health")
def health_check() -> dict:
    """Liveness check for the hosting platform.

    Also reports whether the mail credentials are present, so a deploy with
    missing EMAILJS_* variables is visible before the first submission fails.

    Returns:
        dict: ``{"status": "ok", "mail_configured": bool}``.
    """

    return {"status": "ok", "mail_configured": settings.mail.is_configured}
