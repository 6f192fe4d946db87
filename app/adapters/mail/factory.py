"""Factory for creating mail client instances."""

from app.adapters.mail.base import AbstractMailClient
from app.adapters.mail.emailjs_client import EmailJSClient
from app.core.config import MailSettings, settings


def create_mail_client(mail_settings: MailSettings | None = None) -> AbstractMailClient:
    """Instantiate the mail client from configuration.

    Credentials are not bound here: they are passed on every send so a
    missing key is detected per request rather than at startup.

    Returns:
        AbstractMailClient: Configured EmailJS client.
    """
    cfg = mail_settings or settings.mail
    return EmailJSClient(api_url=cfg.api_url, timeout_seconds=cfg.timeout_seconds)
