"""EmailJS REST client adapter."""

from __future__ import annotations

import logging
from typing import Any, Mapping

import httpx

from app.adapters.mail.base import AbstractMailClient
from app.core.errors import MailClientError

logger = logging.getLogger(__name__)


class EmailJSClient(AbstractMailClient):
    """Client for the EmailJS ``/email/send`` endpoint.

    One pooled httpx client per adapter with a bounded timeout. No retries:
    a failed send is reported to the caller as :class:`MailClientError`.
    """

    def __init__(
        self,
        api_url: str,
        timeout_seconds: float = 10.0,
    ) -> None:
        """Initialize the EmailJS client.

        Args:
            api_url: Full URL of the EmailJS send endpoint.
            timeout_seconds: Timeout for each request in seconds.
        """
        self.api_url = api_url
        self.timeout_seconds = timeout_seconds
        self._client: httpx.AsyncClient | None = None

    def _http(self) -> httpx.AsyncClient:
        # Created on first use so it binds to the serving event loop
        if self._client is None or self._client.is_closed:
            self._client = httpx.AsyncClient(timeout=self.timeout_seconds)
        return self._client

    async def aclose(self) -> None:
        """Close the pooled HTTP client; a later send opens a new one."""
        if self._client is not None:
            await self._client.aclose()
            self._client = None

    def _build_body(
        self,
        service_id: str,
        template_id: str,
        template_params: Mapping[str, str],
        public_key: str,
        private_key: str | None,
    ) -> dict[str, Any]:
        body: dict[str, Any] = {
            "service_id": service_id,
            "template_id": template_id,
            "user_id": public_key,
            "template_params": dict(template_params),
        }
        if private_key:
            body["accessToken"] = private_key
        return body

    async def send(
        self,
        service_id: str,
        template_id: str,
        template_params: Mapping[str, str],
        *,
        public_key: str,
        private_key: str | None = None,
    ) -> None:
        """Send one templated email through EmailJS.

        Raises:
            MailClientError: On transport errors, timeouts or a non-2xx status.
        """
        body = self._build_body(service_id, template_id, template_params, public_key, private_key)

        try:
            response = await self._http().post(self.api_url, json=body)
        except httpx.TimeoutException as exc:
            raise MailClientError(
                f"EmailJS request timed out after {self.timeout_seconds}s"
            ) from exc
        except httpx.HTTPError as exc:
            raise MailClientError(f"EmailJS request failed: {exc}") from exc

        if response.is_error:
            # EmailJS answers errors with a plain-text reason
            raise MailClientError(
                f"EmailJS returned {response.status_code}: {response.text.strip()}"
            )

        logger.debug(
            "mail.emailjs.sent",
            extra={"template_id": template_id, "status_code": response.status_code},
        )
