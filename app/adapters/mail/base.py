from abc import ABC, abstractmethod
from typing import Mapping


class AbstractMailClient(ABC):
	"""Interface for template-based transactional mail providers."""

	@abstractmethod
	async def send(
		self,
		service_id: str,
		template_id: str,
		template_params: Mapping[str, str],
		*,
		public_key: str,
		private_key: str | None = None,
	) -> None:
		"""Render ``template_id`` with ``template_params`` and deliver it.

		Args:
			service_id: Provider-side identifier of the sending service.
			template_id: Provider-side template to render.
			template_params: Flat mapping of template variables.
			public_key: Account public key.
			private_key: Optional account private key (server-side calls).

		Raises:
			MailClientError: If the provider rejects the request or is unreachable.
		"""
		...

	async def aclose(self) -> None:
		"""Release provider connections. Called on application shutdown."""
		return None
