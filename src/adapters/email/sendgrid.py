"""
SendGrid email provider - Fallback transport over the v3 HTTP API.

Reaches recipients whose networks block or throttle outbound SMTP. The
fallback is only wired in when SENDGRID_API_KEY is set.
"""

import httpx

from src.domain.exceptions import ProviderConfigurationError
from src.domain.models import DeliveryResult

DEFAULT_API_URL = "https://api.sendgrid.com/v3/mail/send"


class SendGridEmailProvider:
    """
    Implements EmailProvider protocol via httpx.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    name = "sendgrid"

    def __init__(
        self,
        api_key: str | None,
        from_email: str | None,
        from_name: str = "",
        api_url: str = DEFAULT_API_URL,
        timeout: float = 30.0,
        client: httpx.Client | None = None,
    ) -> None:
        self._api_key = api_key
        self._from_email = from_email
        self._from_name = from_name
        self._api_url = api_url
        self._timeout = timeout
        self._client = client

    def send(
        self, recipient: str, subject: str, html_body: str, text_body: str
    ) -> DeliveryResult:
        """
        Post one message to the SendGrid mail/send endpoint.

        Raises:
            ProviderConfigurationError: API key or sender address missing
        """
        if not self._api_key:
            raise ProviderConfigurationError(self.name, "missing API key")
        if not self._from_email:
            raise ProviderConfigurationError(self.name, "missing from address")

        sender = {"email": self._from_email}
        if self._from_name:
            sender["name"] = self._from_name
        payload = {
            "personalizations": [{"to": [{"email": recipient}]}],
            "from": sender,
            "subject": subject,
            "content": [
                {"type": "text/plain", "value": text_body},
                {"type": "text/html", "value": html_body},
            ],
        }
        headers = {"Authorization": f"Bearer {self._api_key}"}

        try:
            if self._client is not None:
                response = self._client.post(
                    self._api_url, json=payload, headers=headers, timeout=self._timeout
                )
            else:
                response = httpx.post(
                    self._api_url, json=payload, headers=headers, timeout=self._timeout
                )
        except httpx.HTTPError as exc:
            return DeliveryResult.failure(self.name, str(exc), error_code=type(exc).__name__)

        if response.is_success:
            return DeliveryResult.success(self.name, response_code=response.status_code)

        return DeliveryResult.failure(
            self.name,
            response.text[:500],
            error_code="HTTPStatusError",
            response_code=response.status_code,
        )
