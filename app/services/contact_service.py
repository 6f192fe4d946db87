"""Contact submission service: validation and outbound email dispatch.

This service holds the business logic behind the contact endpoint once the
rate limit and CSRF checks have passed. It handles:
- Server-side validation of the payload (client-side checks are bypassable)
- Mapping the request category to the label shown in the email
- Dispatch of the notification email and the optional autoresponse

Credentials come from MailSettings and are never part of the request.
"""

from __future__ import annotations

import logging
from typing import Any

from pydantic import ValidationError

from app.adapters.mail.base import AbstractMailClient
from app.core.config import MailSettings
from app.core.errors import MailDeliveryAppError, ValidationAppError
from app.schemas.contact import ContactSubmission, RequestType

logger = logging.getLogger(__name__)

REQUEST_TYPE_LABELS: dict[str, str] = {
    RequestType.DEVIS.value: "Demande de devis",
    RequestType.RENDEZ_VOUS.value: "Prise de rendez-vous",
}
DEFAULT_REQUEST_TYPE_LABEL = "Question générale"

PHONE_FALLBACK = "Non renseigné"
SECTOR_FALLBACK = "Non spécifié"


def request_type_label(request_type: str | None) -> str:
    """Return the human-readable label for a request category.

    Examples:
        >>> request_type_label("devis")
        'Demande de devis'
        >>> request_type_label("anything-else")
        'Question générale'
    """
    return REQUEST_TYPE_LABELS.get(request_type or "", DEFAULT_REQUEST_TYPE_LABEL)


def find_missing_fields(submission: ContactSubmission) -> list[str]:
    """List mandatory fields that are absent, empty, or (for consent) not true."""
    missing = [
        field_name
        for field_name in ("name", "email", "message")
        if not getattr(submission, field_name)
    ]
    if submission.rgpd is not True:
        missing.append("rgpd")
    return missing


def parse_submission(body: Any) -> ContactSubmission:
    """Validate a decoded JSON body into a complete submission.

    Args:
        body: Decoded JSON request body.

    Returns:
        ContactSubmission with every mandatory field present.

    Raises:
        ValidationAppError: If the body is not an object, has ill-typed
            fields, or lacks a mandatory field.
    """
    if not isinstance(body, dict):
        raise ValidationAppError(
            code="invalid_payload",
            message="Missing required fields",
            details={"hint": "Request body must be a JSON object"},
        )

    try:
        submission = ContactSubmission.model_validate(body)
    except ValidationError as exc:
        invalid = sorted({str(err["loc"][0]) for err in exc.errors() if err.get("loc")})
        logger.info("contact.invalid_payload", extra={"invalid_fields": invalid})
        raise ValidationAppError(
            code="invalid_payload",
            message="Missing required fields",
            details={"missing_fields": invalid},
        ) from exc

    missing = find_missing_fields(submission)
    if missing:
        logger.info("contact.invalid_payload", extra={"missing_fields": missing})
        raise ValidationAppError(
            code="invalid_payload",
            message="Missing required fields",
            details={"missing_fields": missing},
        )

    return submission


def build_template_params(submission: ContactSubmission, client_ip: str) -> dict[str, str]:
    """Variables for the notification template sent to the firm."""
    return {
        "from_name": submission.name or "",
        "from_email": submission.email or "",
        "phone": submission.phone or PHONE_FALLBACK,
        "request_type": request_type_label(submission.request_type),
        "sector": submission.sector or SECTOR_FALLBACK,
        "message": submission.message or "",
        "ip_address": client_ip,
    }


def build_autoresponse_params(submission: ContactSubmission) -> dict[str, str]:
    """Variables for the confirmation template sent to the submitter."""
    return {
        "to_name": submission.name or "",
        "to_email": submission.email or "",
        "request_type": request_type_label(submission.request_type),
    }


class ContactService:
    """Send contact submissions through the mail collaborator.

    No retries: a failed dispatch is reported as ``send_failed``.
    """

    def __init__(self, mail: AbstractMailClient, mail_settings: MailSettings) -> None:
        self.mail = mail
        self.mail_settings = mail_settings

    def _ensure_configured(self) -> None:
        """Fail with send_failed when server-side credentials are missing.

        Raises:
            MailDeliveryAppError: If service id, template id or public key is unset.
        """
        if self.mail_settings.is_configured:
            return

        logger.error(
            "contact.mail_not_configured",
            extra={
                "service_id_set": bool(self.mail_settings.service_id),
                "template_id_set": bool(self.mail_settings.template_id),
                "public_key_set": bool(self.mail_settings.public_key),
            },
        )
        raise MailDeliveryAppError(
            code="send_failed",
            message="Email service not configured",
            details={"message": "EmailJS configuration missing"},
        )

    async def _dispatch(self, submission: ContactSubmission, client_ip: str) -> bool:
        """Send the notification, then the autoresponse when configured.

        Returns:
            True if an autoresponse was sent.
        """
        cfg = self.mail_settings
        credentials = {"public_key": cfg.public_key or "", "private_key": cfg.private_key}

        await self.mail.send(
            cfg.service_id or "",
            cfg.template_id or "",
            build_template_params(submission, client_ip),
            **credentials,
        )

        if not cfg.autoresponse_enabled:
            return False

        await self.mail.send(
            cfg.service_id or "",
            cfg.autoresponse_template_id or "",
            build_autoresponse_params(submission),
            **credentials,
        )
        return True

    async def submit(self, submission: ContactSubmission, *, client_ip: str) -> None:
        """Deliver a validated submission.

        Args:
            submission: Complete submission (see :func:`parse_submission`).
            client_ip: Resolved client identifier, included in the email.

        Raises:
            MailDeliveryAppError: If credentials are missing or any dispatch
                fails (primary or autoresponse).
        """
        # Step 1: Server-held credentials must be present
        self._ensure_configured()

        # Step 2: Primary + optional autoresponse, one failure path for both
        try:
            autoresponse_sent = await self._dispatch(submission, client_ip)
        except Exception as exc:
            logger.error(
                "contact.send_failed",
                extra={
                    "error_type": type(exc).__name__,
                    "error_msg": str(exc),
                },
            )
            raise MailDeliveryAppError(
                code="send_failed",
                message="Failed to send email",
                details={"message": str(exc) or "An error occurred"},
            ) from exc

        logger.info(
            "contact.sent",
            extra={
                "request_type": request_type_label(submission.request_type),
                "autoresponse_sent": autoresponse_sent,
            },
        )
