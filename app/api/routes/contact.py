from fastapi import APIRouter, Depends, Request, Response

from app.adapters.mail.base import AbstractMailClient
from app.adapters.rate_limit.base import RateLimitResult
from app.core.config import settings
from app.core.csrf import verify_csrf
from app.core.errors import MethodNotAllowedAppError, ValidationAppError
from app.core.rate_limit import enforce_rate_limit, rate_limit_headers, resolve_client_ip
from app.schemas.contact import ContactResponse, ErrorResponse
from app.services.contact_service import ContactService, parse_submission

router = APIRouter(tags=["Contact"])

_ERROR_RESPONSES = {
    400: {"model": ErrorResponse, "description": "Missing or invalid fields"},
    403: {"model": ErrorResponse, "description": "CSRF token missing or mismatched"},
    429: {"model": ErrorResponse, "description": "Too many submissions from this IP"},
    500: {"model": ErrorResponse, "description": "Mail service unconfigured or failing"},
}


def get_mail_client(request: Request) -> AbstractMailClient:
    """Return the mail client owned by the running application."""
    return request.app.state.mail_client


def get_contact_service(
    mail_client: AbstractMailClient = Depends(get_mail_client),
) -> ContactService:
    return ContactService(mail=mail_client, mail_settings=settings.mail)


async def read_json_body(request: Request):
    """Decode the request body, mapping malformed JSON to a 400."""
    try:
        return await request.json()
    except ValueError as exc:
        raise ValidationAppError(
            code="invalid_payload",
            message="Missing required fields",
            details={"hint": "Request body must be valid JSON"},
        ) from exc


@router.post(
    "/contact",
    response_model=ContactResponse,
    responses=_ERROR_RESPONSES,
)
@router.post(
    "/api/contact",
    response_model=ContactResponse,
    responses=_ERROR_RESPONSES,
)
async def submit_contact(
    request: Request,
    response: Response,
    rate_limit: RateLimitResult | None = Depends(enforce_rate_limit),
    _csrf: None = Depends(verify_csrf),
    service: ContactService = Depends(get_contact_service),
) -> ContactResponse:
    """Handle a contact form submission.

    Flow: rate limit → CSRF → payload validation → email dispatch.
    The rate limit and CSRF checks run as dependencies, in that order,
    before the body is read.

    Args:
        request: Incoming request (JSON body read after the guards pass).
        response: Outgoing response, receives the quota headers.
        rate_limit: Result of the already-consumed admit() call.
        service: Contact service bound to the application's mail client.

    Returns:
        ContactResponse: Success confirmation.

    Raises:
        ValidationAppError: 400 when a mandatory field is missing.
        MailDeliveryAppError: 500 when the email could not be sent.
    """
    body = await read_json_body(request)
    submission = parse_submission(body)

    await service.submit(submission, client_ip=resolve_client_ip(request))

    if rate_limit is not None:
        response.headers.update(rate_limit_headers(rate_limit))

    return ContactResponse(success=True, message="Email sent successfully")


@router.api_route(
    "/contact",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
@router.api_route(
    "/api/contact",
    methods=["GET", "PUT", "PATCH", "DELETE"],
    include_in_schema=False,
)
async def contact_method_not_allowed() -> None:
    """Submissions must use POST so form data never lands in URLs or logs."""
    raise MethodNotAllowedAppError(
        code="method_not_allowed",
        message="Method not allowed",
        headers={"Allow": "POST"},
    )
