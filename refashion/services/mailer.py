import httpx

from refashion.errors import ConfigurationError, RemoteUnavailable
from refashion.logger import get_logger

logger = get_logger(__name__)

RESEND_URL = "https://api.resend.com/emails"


class ResendMailer:
    """Relays contact-form submissions to the team inbox through Resend."""

    def __init__(self, api_key: str, sender: str, recipient: str, client: httpx.AsyncClient | None = None):
        self.api_key = api_key
        self.sender = sender
        self.recipient = recipient
        self._client = client or httpx.AsyncClient(timeout=15.0)

    async def send(self, subject: str, text: str):
        logger.info("Contact form to %s: %s", self.recipient, subject)
        if not self.api_key:
            raise ConfigurationError("Mail relay is not configured: set RESEND_API_KEY")

        try:
            response = await self._client.post(
                RESEND_URL,
                headers={"Authorization": f"Bearer {self.api_key}"},
                json={
                    "from": self.sender,
                    "to": [self.recipient],
                    "subject": subject,
                    "text": text,
                },
            )
        except httpx.HTTPError as e:
            logger.error("Resend request failed: %s", e)
            raise RemoteUnavailable("Failed to send message") from e

        if response.status_code >= 400:
            logger.error("Resend error %s: %s", response.status_code, response.text[:200])
            raise RemoteUnavailable("Failed to send message")
        logger.info("Email sent: %s", subject)

    async def close(self):
        await self._client.aclose()
