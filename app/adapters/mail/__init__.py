"""Mail adapter layer - abstracts over the transactional email provider."""

from app.adapters.mail.base import AbstractMailClient
from app.adapters.mail.emailjs_client import EmailJSClient
from app.adapters.mail.factory import create_mail_client

__all__ = [
    "AbstractMailClient",
    "EmailJSClient",
    "create_mail_client",
]
