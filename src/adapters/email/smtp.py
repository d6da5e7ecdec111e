"""
SMTP email provider - Primary transport for challenge delivery.

Opens one connection per message with a bounded timeout, so a hung server
costs one attempt rather than a stuck worker thread. Port 465 style
implicit TLS is used when use_ssl is set, STARTTLS otherwise.
"""

import smtplib
import ssl
from email.message import EmailMessage
from email.utils import formataddr

from src.domain.exceptions import ProviderConfigurationError
from src.domain.models import DeliveryResult


class SmtpEmailProvider:
    """
    Implements EmailProvider protocol via smtplib.

    Uses structural subtyping - no explicit inheritance from Protocol.
    """

    name = "smtp"

    def __init__(
        self,
        host: str | None,
        port: int,
        username: str | None,
        password: str | None,
        from_email: str | None,
        from_name: str = "",
        use_ssl: bool = False,
        timeout: float = 30.0,
    ) -> None:
        self._host = host
        self._port = port
        self._username = username
        self._password = password
        self._from_email = from_email or username
        self._from_name = from_name
        self._use_ssl = use_ssl
        self._timeout = timeout

    def send(
        self, recipient: str, subject: str, html_body: str, text_body: str
    ) -> DeliveryResult:
        """
        Send one message over SMTP.

        Raises:
            ProviderConfigurationError: host, credentials or sender missing
        """
        self._check_configuration()

        message = EmailMessage()
        message["Subject"] = subject
        message["From"] = formataddr((self._from_name, self._from_email))
        message["To"] = recipient
        message.set_content(text_body)
        message.add_alternative(html_body, subtype="html")

        try:
            with self._connect() as server:
                server.login(self._username, self._password)
                server.send_message(message)
        except smtplib.SMTPResponseException as exc:
            # Covers authentication, sender and data refusals
            return DeliveryResult.failure(
                self.name,
                _decode(exc.smtp_error),
                error_code=type(exc).__name__,
                response_code=exc.smtp_code,
            )
        except smtplib.SMTPRecipientsRefused as exc:
            code, reason = next(iter(exc.recipients.values()), (None, b""))
            return DeliveryResult.failure(
                self.name,
                _decode(reason),
                error_code=type(exc).__name__,
                response_code=code,
            )
        except (smtplib.SMTPException, OSError) as exc:
            # Connection refused, timeouts, TLS errors, dropped sessions
            return DeliveryResult.failure(self.name, str(exc), error_code=type(exc).__name__)

        return DeliveryResult.success(self.name, response_code=250)

    def _connect(self) -> smtplib.SMTP:
        context = ssl.create_default_context()
        if self._use_ssl:
            return smtplib.SMTP_SSL(
                self._host, self._port, timeout=self._timeout, context=context
            )
        server = smtplib.SMTP(self._host, self._port, timeout=self._timeout)
        try:
            server.starttls(context=context)
        except Exception:
            server.close()
            raise
        return server

    def _check_configuration(self) -> None:
        missing = [
            label
            for label, value in (
                ("host", self._host),
                ("username", self._username),
                ("password", self._password),
                ("from address", self._from_email),
            )
            if not value
        ]
        if missing:
            raise ProviderConfigurationError(self.name, f"missing {', '.join(missing)}")


def _decode(value: bytes | str) -> str:
    if isinstance(value, bytes):
        return value.decode(errors="replace")
    return value
