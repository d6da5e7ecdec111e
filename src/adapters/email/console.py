"""
Console email provider - Implements EmailProvider protocol.

Logs messages instead of sending them. Selected with EMAIL_PROVIDER=console
for local development, where reading the code from the log is the point.
"""

import logging

from src.domain.models import DeliveryResult

logger = logging.getLogger(__name__)


class ConsoleEmailProvider:
    """
    Implements EmailProvider protocol via console logging.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    name = "console"

    def send(
        self, recipient: str, subject: str, html_body: str, text_body: str
    ) -> DeliveryResult:
        """
        Log the message at INFO level (simulates email delivery).

        The plain-text body, which contains the code, is logged so it is
        visible in docker-compose logs. Never use this provider in production.
        """
        logger.info("[EMAIL] To: %s Subject: %s\n%s", recipient, subject, text_body)
        return DeliveryResult.success(self.name)
