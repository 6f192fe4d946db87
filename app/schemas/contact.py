"""Pydantic schemas for contact form submissions."""

from __future__ import annotations

from enum import Enum

from pydantic import BaseModel, ConfigDict, Field, StrictBool


class RequestType(str, Enum):
    """Categories offered by the contact form."""

    DEVIS = "devis"
    RENDEZ_VOUS = "rendez-vous"
    QUESTION = "question"


class ContactSubmission(BaseModel):
    """Contact form payload as posted by the site.

    Every field is optional at parse time: presence of the mandatory fields is
    enforced by the service so a missing field maps to a 400 with the list of
    missing fields instead of a schema error.
    """

    model_config = ConfigDict(
        populate_by_name=True,
        str_strip_whitespace=True,
        extra="ignore",
    )

    name: str | None = Field(default=None, description="Submitter's full name.")
    email: str | None = Field(default=None, description="Reply-to address.")
    phone: str | None = Field(default=None, description="Optional phone number.")
    request_type: str | None = Field(
        default=None,
        alias="requestType",
        description="One of 'devis', 'rendez-vous', 'question'. Unknown values are accepted.",
    )
    sector: str | None = Field(default=None, description="Optional business sector.")
    message: str | None = Field(default=None, description="Free-text message.")
    rgpd: StrictBool | None = Field(
        default=None,
        description="Privacy-policy consent. Must be the JSON literal true.",
    )


class ContactResponse(BaseModel):
    """Body returned when the notification email was sent."""

    success: bool = Field(..., description="Always true on a 200 response.")
    message: str = Field(..., description="Human-readable confirmation.")


class ErrorResponse(BaseModel):
    """Body returned for every rejected request."""

    error: str = Field(..., description="Human-readable error.")
    code: str = Field(
        ...,
        description=(
            "Machine-readable reason: rate_limited, csrf_invalid, invalid_payload, "
            "send_failed, method_not_allowed."
        ),
    )
    request_id: str | None = Field(default=None, description="Correlation id.")
    retryAfter: int | None = Field(
        default=None,
        description="Seconds to wait before retrying (rate_limited only).",
    )
    message: str | None = Field(
        default=None,
        description="Diagnostic detail, only returned when APP_DEBUG=true.",
    )
