"""
Mailgun delivery over its HTTP API

When no API key is configured the client is disabled and `send` only logs
that the message was skipped.
"""
import html
from typing import Optional
import httpx
from ..config import Settings
from ..exceptions import MailDeliveryError
import logging

logger = logging.getLogger(__name__)

RESET_PASSWORD_TEMPLATE = """\
<html>
  <body>
    <p>Hello {name},</p>
    <p>We received a request to reset your password. Use the link below to choose a new one:</p>
    <p><a href="{url}">Reset password</a></p>
    <p>If you did not request this, you can ignore this email.</p>
  </body>
</html>
"""


def render_reset_password(name: Optional[str], url: str) -> str:
    return RESET_PASSWORD_TEMPLATE.format(name=html.escape(name or "there"), url=html.escape(url))


class MailClient:
    """Sends transactional mail through Mailgun"""

    def __init__(self, settings: Settings, transport: httpx.BaseTransport = None):
        self.domain = settings.mailgun_domain
        self.sender = f"{settings.mailgun_sender_name} <{settings.mailgun_sender_email}>"
        self._client = None
        if settings.mail_enabled:
            self._client = httpx.Client(
                base_url=settings.mailgun_base_url.rstrip("/"),
                auth=("api", settings.mailgun_api_key),
                timeout=10.0,
                transport=transport,
            )
            logger.info(f"Initialized Mailgun client for domain {self.domain}")

    @property
    def enabled(self) -> bool:
        return self._client is not None

    def send(self, to: str, subject: str, html: str) -> bool:
        """
        Send one message.

        Returns:
            True when delivered to the provider, False when mail is disabled

        Raises:
            MailDeliveryError: the provider could not be reached or rejected the message
        """
        if not self.enabled:
            logger.warning(f"Mail client not configured, skipping email to {to}")
            return False
        try:
            response = self._client.post(
                f"/{self.domain}/messages",
                data={"from": self.sender, "to": to, "subject": subject, "html": html},
            )
            response.raise_for_status()
        except httpx.HTTPError as e:
            logger.error(f"Mailgun delivery to {to} failed: {e}")
            raise MailDeliveryError() from e
        logger.info(f"Email '{subject}' sent to {to}")
        return True

    def close(self) -> None:
        if self._client is not None:
            self._client.close()
