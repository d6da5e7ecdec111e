"""Email provider adapters - Transports for challenge delivery."""

from .console import ConsoleEmailProvider
from .sendgrid import SendGridEmailProvider
from .smtp import SmtpEmailProvider

__all__ = ["ConsoleEmailProvider", "SendGridEmailProvider", "SmtpEmailProvider"]
